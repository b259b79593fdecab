from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from delivery_api.database import get_db
from delivery_api.middleware.auth import get_current_user
from delivery_api.middleware.authorization import require_roles
from delivery_api.routes.deliveries import FIELD_ROLES, occurrence_to_response
from delivery_api.schemas.common import DataResponse, ListResponse, build_list
from delivery_api.schemas.occurrence import OccurrenceResponse
from delivery_api.services.occurrence_service import get_occurrence, list_occurrences

router = APIRouter()


@router.get("", response_model=ListResponse[OccurrenceResponse])
async def list_occurrences_route(
    type: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    driver_id: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*FIELD_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    rows = await list_occurrences(
        db,
        current_user,
        occurrence_type=type,
        start_date=start_date,
        end_date=end_date,
        driver_id=driver_id,
    )
    return build_list([occurrence_to_response(*row) for row in rows])


@router.get("/{occurrence_id}", response_model=DataResponse[OccurrenceResponse])
async def get_occurrence_route(
    occurrence_id: str,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_roles(*FIELD_ROLES)),
    db: AsyncSession = Depends(get_db),
):
    row = await get_occurrence(db, occurrence_id, current_user)
    return DataResponse(data=occurrence_to_response(*row))
