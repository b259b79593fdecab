# delivery_api/services/tracking_service.py
"""Route and tracking rows that reference a delivery."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from delivery_api.models.driver import Vehicle
from delivery_api.models.route import Route, RouteDelivery, TrackingPoint


async def delete_route_links_for_delivery(db: AsyncSession, delivery_id: int) -> int:
    result = await db.execute(
        delete(RouteDelivery).where(RouteDelivery.delivery_note_id == delivery_id)
    )
    return result.rowcount or 0


async def delete_tracking_points_for_delivery(
    db: AsyncSession, delivery_id: int
) -> int:
    result = await db.execute(
        delete(TrackingPoint).where(TrackingPoint.delivery_id == delivery_id)
    )
    return result.rowcount or 0


async def vehicle_label_for_delivery(
    db: AsyncSession, delivery_id: int
) -> Optional[str]:
    """Plate (and model) of the vehicle on the delivery's route, if routed."""
    result = await db.execute(
        select(Vehicle.plate, Vehicle.model)
        .join(Route, Route.vehicle_id == Vehicle.id)
        .join(RouteDelivery, RouteDelivery.route_id == Route.id)
        .where(RouteDelivery.delivery_note_id == delivery_id)
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None
    plate, model = row[0], row[1]
    return f"{plate} ({model})" if model else plate
