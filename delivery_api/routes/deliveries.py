from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from delivery_api.database import get_db
from delivery_api.middleware.auth import get_current_user
from delivery_api.middleware.authorization import require_roles
from delivery_api.models.delivery import Delivery, DeliveryOccurrence
from delivery_api.schemas.common import DataResponse, ListResponse, MessageResponse, build_list
from delivery_api.schemas.delivery import (
    DeliveryDetailResponse,
    DeliveryResponse,
    DeliveryStatusUpdate,
)
from delivery_api.schemas.occurrence import OccurrenceCreate, OccurrenceResponse
from delivery_api.services import delivery_service
from delivery_api.services.alert_service import AlertRecorder, get_alert_recorder
from delivery_api.services.occurrence_service import occurrences_for_delivery
from delivery_api.services.visibility_service import DeliveryFilters, list_deliveries

logger = structlog.get_logger()
router = APIRouter()

FIELD_ROLES = ("ADMIN", "SUPERVISOR", "DRIVER")


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _to_response(d: Delivery) -> DeliveryResponse:
    return DeliveryResponse(
        id=d.id,
        company_id=d.company_id,
        driver_id=d.driver_id,
        created_by_user_id=d.created_by_user_id,
        client_id=d.client_id,
        nf_number=d.nf_number,
        client_name=d.client_name_extracted,
        client_address=d.client_address,
        merchandise_value=d.merchandise_value,
        status=d.status,
        notes=d.notes,
        delivery_date_expected=d.delivery_date_expected,
        created_at=_iso(d.created_at) or "",
        updated_at=_iso(d.updated_at),
    )


def occurrence_to_response(
    o: DeliveryOccurrence,
    nf_number: Optional[str] = None,
    driver_name: Optional[str] = None,
    created_by_name: Optional[str] = None,
    client_name: Optional[str] = None,
    client_address: Optional[str] = None,
) -> OccurrenceResponse:
    return OccurrenceResponse(
        id=o.id,
        delivery_id=o.delivery_id,
        driver_id=o.driver_id,
        type=o.type,
        description=o.description,
        photo_url=o.photo_url,
        latitude=o.latitude,
        longitude=o.longitude,
        nf_number=nf_number,
        client_name=client_name,
        client_address=client_address,
        driver_name=driver_name,
        created_by=o.created_by,
        created_by_name=created_by_name,
        created_at=_iso(o.created_at) or "",
    )


@router.get("", response_model=ListResponse[DeliveryResponse])
async def list_deliveries_route(
    status_filter: Optional[str] = Query(None, alias="status"),
    client_id: Optional[str] = Query(None),
    driver_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*FIELD_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    filters = DeliveryFilters(
        status=status_filter,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        driver_id=driver_id,
    )
    deliveries = await list_deliveries(db, current_user, filters)
    return build_list([_to_response(d) for d in deliveries])


@router.get("/{delivery_id}", response_model=DataResponse[DeliveryDetailResponse])
async def get_delivery(
    delivery_id: str,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*FIELD_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    delivery = await delivery_service.get_delivery(db, delivery_id, current_user)
    occurrences = await occurrences_for_delivery(db, delivery.id)
    detail = DeliveryDetailResponse(
        **_to_response(delivery).model_dump(),
        occurrences=[occurrence_to_response(o, delivery.nf_number) for o in occurrences],
    )
    return DataResponse(data=detail)


@router.put("/{delivery_id}/status", response_model=DataResponse[DeliveryResponse])
async def update_delivery_status(
    delivery_id: str,
    body: DeliveryStatusUpdate,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*FIELD_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    delivery = await delivery_service.update_delivery_status(
        db, delivery_id, current_user, body.status, notes=body.notes
    )
    return DataResponse(data=_to_response(delivery))


@router.delete("/{delivery_id}", response_model=MessageResponse)
async def delete_delivery(
    delivery_id: str,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*FIELD_ROLES)),
    db: AsyncSession = Depends(get_db),
    recorder: AlertRecorder = Depends(get_alert_recorder),
):
    result = await delivery_service.delete_delivery(db, delivery_id, current_user, recorder)
    return MessageResponse(
        message="Delivery deleted",
        warning=None if result.alert_recorded else "Deletion alert was not recorded",
    )


@router.post(
    "/{delivery_id}/occurrence",
    response_model=DataResponse[OccurrenceResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_occurrence(
    delivery_id: str,
    body: OccurrenceCreate,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*FIELD_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    occurrence = await delivery_service.register_occurrence(
        db,
        delivery_id,
        current_user,
        body.type,
        description=body.description,
        latitude=body.latitude,
        longitude=body.longitude,
        photo_url=body.photo_url,
    )
    return DataResponse(data=occurrence_to_response(occurrence))
