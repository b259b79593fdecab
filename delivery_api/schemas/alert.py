from typing import Optional
from pydantic import BaseModel, Field


class AlertResponse(BaseModel):
    id: str = Field(..., description="Alert identifier")
    type: str
    severity: str
    title: str
    description: Optional[str] = None
    companyId: Optional[int] = None
    deliveryId: Optional[str] = None
    nfNumber: Optional[str] = None
    driverId: Optional[str] = None
    driverName: Optional[str] = None
    vehicleLabel: Optional[str] = None
    actorId: Optional[str] = None
    actorName: Optional[str] = None
    actorRole: Optional[str] = None
    occurredAt: str
