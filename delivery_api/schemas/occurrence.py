from typing import Literal, Optional
from pydantic import BaseModel, Field


class OccurrenceCreate(BaseModel):
    type: Literal["reentrega", "recusa", "avaria"]
    description: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    photo_url: Optional[str] = None


class OccurrenceResponse(BaseModel):
    id: int
    delivery_id: int
    driver_id: Optional[int] = None
    type: str
    description: Optional[str] = None
    photo_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    nf_number: Optional[str] = None
    client_name: Optional[str] = None
    client_address: Optional[str] = None
    driver_name: Optional[str] = None
    created_by: Optional[int] = None
    created_by_name: Optional[str] = None
    created_at: str
