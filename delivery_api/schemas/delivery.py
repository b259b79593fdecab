from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

from delivery_api.schemas.occurrence import OccurrenceResponse


class DeliveryResponse(BaseModel):
    id: int
    company_id: int
    driver_id: Optional[int] = None
    created_by_user_id: Optional[int] = None
    client_id: Optional[int] = None
    nf_number: Optional[str] = None
    client_name: Optional[str] = None
    client_address: Optional[str] = None
    merchandise_value: Optional[float] = None
    status: str
    notes: Optional[str] = None
    delivery_date_expected: Optional[date] = None
    created_at: str
    updated_at: Optional[str] = None


class DeliveryDetailResponse(DeliveryResponse):
    occurrences: List[OccurrenceResponse] = []


class DeliveryStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=20)
    notes: Optional[str] = None
