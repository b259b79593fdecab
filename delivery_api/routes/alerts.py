from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from delivery_api.database import get_db
from delivery_api.middleware.auth import get_current_user
from delivery_api.middleware.authorization import require_roles
from delivery_api.schemas.alert import AlertResponse
from delivery_api.schemas.common import ListResponse, build_list
from delivery_api.services.alert_service import (
    AlertRecord,
    AlertRecorder,
    get_alert_recorder,
)

router = APIRouter()


def _to_response(a: AlertRecord) -> AlertResponse:
    return AlertResponse(
        id=a.identifier,
        type=a.type,
        severity=a.severity,
        title=a.title,
        description=a.description,
        companyId=a.company_id,
        deliveryId=a.delivery_id,
        nfNumber=a.nf_number,
        driverId=a.driver_id,
        driverName=a.driver_name,
        vehicleLabel=a.vehicle_label,
        actorId=a.actor_id,
        actorName=a.actor_name,
        actorRole=a.actor_role,
        occurredAt=a.occurred_at.isoformat(),
    )


@router.get("", response_model=ListResponse[AlertResponse])
async def list_alerts(
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles("ADMIN", "SUPERVISOR")),
    db: AsyncSession = Depends(get_db),
    recorder: AlertRecorder = Depends(get_alert_recorder),
):
    """Most recent operational alerts for the caller's company."""
    alerts = await recorder.recent(db, current_user["company_id"], limit)
    return build_list([_to_response(a) for a in alerts])
