# delivery_api/services/delivery_service.py
"""
Delivery lifecycle operations behind the deliveries routes.

Reads and updates use the caller's session (no commit); get_db() commits.
delete_delivery is the exception: it commits the cascade itself so the
alert is only emitted for a deletion that is durable.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from delivery_api.errors import NotFoundError, PreconditionFailedError
from delivery_api.models.delivery import Delivery, DeliveryOccurrence
from delivery_api.models.user import ROLE_DRIVER, User
from delivery_api.services.alert_service import ALERT_DELIVERY_DELETED, AlertRecorder
from delivery_api.services.identity_service import (
    DriverIdentity,
    coerce_id,
    resolve_driver_identifiers,
)
from delivery_api.services.occurrence_service import (
    OCCURRENCE_REFUSAL,
    OCCURRENCE_TYPES,
    delete_occurrences_for_delivery,
)
from delivery_api.services.ownership_service import (
    can_delete,
    can_mutate_status,
    owns_delivery,
    raise_for_decision,
)
from delivery_api.services.receipt_service import has_attached_receipt
from delivery_api.services.tracking_service import (
    delete_route_links_for_delivery,
    delete_tracking_points_for_delivery,
    vehicle_label_for_delivery,
)

logger = structlog.get_logger()


@dataclass
class DeletionResult:
    delivery_id: int
    alert_recorded: bool


async def fetch_delivery(db: AsyncSession, delivery_id, company_id) -> Delivery:
    """Delivery in the given company, or NotFoundError."""
    delivery_pk = coerce_id(delivery_id)
    if delivery_pk is None:
        raise NotFoundError("Delivery not found")
    result = await db.execute(
        select(Delivery).where(
            Delivery.id == delivery_pk,
            Delivery.company_id == coerce_id(company_id),
        )
    )
    delivery = result.scalar_one_or_none()
    if delivery is None:
        raise NotFoundError("Delivery not found")
    return delivery


async def _actor_identity(db: AsyncSession, actor: dict) -> Optional[DriverIdentity]:
    if actor.get("role") != ROLE_DRIVER:
        return None
    return await resolve_driver_identifiers(
        db, actor.get("user_id"), actor.get("company_id")
    )


async def get_delivery(db: AsyncSession, delivery_id, actor: dict) -> Delivery:
    """Single delivery; drivers only see deliveries assigned to or created by them."""
    delivery = await fetch_delivery(db, delivery_id, actor.get("company_id"))
    if actor.get("role") == ROLE_DRIVER:
        identity = await _actor_identity(db, actor)
        if not owns_delivery(delivery, actor, identity):
            raise NotFoundError("Delivery not found")
    return delivery


async def driver_name_for_delivery(db: AsyncSession, delivery: Delivery) -> Optional[str]:
    """Full name of the delivery's driver, whichever id space driver_id holds."""
    if delivery.driver_id is None:
        return None
    identity = await resolve_driver_identifiers(db, delivery.driver_id, delivery.company_id)
    user_id = identity.driver_user_id if identity is not None else delivery.driver_id
    if user_id is None:
        return None
    result = await db.execute(select(User.full_name).where(User.id == user_id))
    return result.scalar_one_or_none()


async def update_delivery_status(
    db: AsyncSession,
    delivery_id,
    actor: dict,
    new_status: str,
    notes: Optional[str] = None,
) -> Delivery:
    delivery = await fetch_delivery(db, delivery_id, actor.get("company_id"))
    identity = await _actor_identity(db, actor)
    raise_for_decision(can_mutate_status(delivery, actor, new_status, identity=identity))

    previous = delivery.status
    delivery.status = new_status.strip().upper()
    if notes is not None:
        delivery.notes = notes
    delivery.updated_at = datetime.utcnow()
    await db.flush()

    logger.info(
        "delivery_status_updated",
        delivery_id=delivery.id,
        from_status=previous,
        to_status=delivery.status,
        actor_id=str(actor.get("id")),
    )
    return delivery


async def register_occurrence(
    db: AsyncSession,
    delivery_id,
    actor: dict,
    occurrence_type: str,
    description: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    photo_url: Optional[str] = None,
) -> DeliveryOccurrence:
    """Record a field occurrence; a refusal also moves the delivery to REFUSED.

    Drivers may only report on deliveries they own; anything else reads as
    missing, same as ``get_delivery``.
    """
    delivery = await fetch_delivery(db, delivery_id, actor.get("company_id"))
    identity = await _actor_identity(db, actor)
    if actor.get("role") == ROLE_DRIVER and not owns_delivery(delivery, actor, identity):
        raise NotFoundError("Delivery not found")

    if occurrence_type not in OCCURRENCE_TYPES:
        raise PreconditionFailedError(
            f"Unknown occurrence type '{occurrence_type}'",
            code="INVALID_OCCURRENCE_TYPE",
        )

    if occurrence_type == OCCURRENCE_REFUSAL:
        raise_for_decision(can_mutate_status(delivery, actor, "REFUSED", identity=identity))
        delivery.status = "REFUSED"
        delivery.updated_at = datetime.utcnow()

    actor_user_id = coerce_id(actor.get("user_id"))
    occurrence = DeliveryOccurrence(
        delivery_id=delivery.id,
        company_id=delivery.company_id,
        driver_id=actor_user_id,
        type=occurrence_type,
        description=description,
        photo_url=photo_url,
        latitude=latitude,
        longitude=longitude,
        created_by=actor_user_id,
    )
    db.add(occurrence)
    await db.flush()
    await db.refresh(occurrence)

    logger.info(
        "occurrence_registered",
        occurrence_id=occurrence.id,
        delivery_id=delivery.id,
        type=occurrence_type,
    )
    return occurrence


async def delete_delivery(
    db: AsyncSession,
    delivery_id,
    actor: dict,
    recorder: AlertRecorder,
) -> DeletionResult:
    """
    Remove a delivery and the rows that reference it, then emit an alert.

    Required phase: checks, cascade (occurrences, route links, tracking
    points, delivery) and commit. Optional phase: the alert; its failure
    is reported in the result, never raised.
    """
    company_id = actor.get("company_id")
    delivery = await fetch_delivery(db, delivery_id, company_id)
    delivery_pk = delivery.id
    identity = await _actor_identity(db, actor)
    receipt_attached = await has_attached_receipt(db, delivery_pk)
    raise_for_decision(
        can_delete(delivery, actor, identity=identity, has_receipt=receipt_attached)
    )

    alert_payload = {
        "type": ALERT_DELIVERY_DELETED,
        "company_id": delivery.company_id,
        "delivery_id": delivery_pk,
        "nf_number": delivery.nf_number,
        "driver_id": delivery.driver_id,
        "driver_name": await driver_name_for_delivery(db, delivery),
        "vehicle_label": await vehicle_label_for_delivery(db, delivery_pk),
        "actor_id": actor.get("user_id"),
        "actor_name": actor.get("full_name"),
        "actor_role": actor.get("role"),
    }

    occurrences = await delete_occurrences_for_delivery(db, delivery_pk)
    route_links = await delete_route_links_for_delivery(db, delivery_pk)
    tracking_points = await delete_tracking_points_for_delivery(db, delivery_pk)
    result = await db.execute(
        delete(Delivery).where(
            Delivery.id == delivery_pk,
            Delivery.company_id == coerce_id(company_id),
        )
    )
    if not result.rowcount:
        # Removed concurrently between fetch and delete.
        await db.rollback()
        raise NotFoundError("Delivery not found")
    await db.commit()

    logger.info(
        "delivery_deleted",
        delivery_id=delivery_pk,
        company_id=alert_payload["company_id"],
        actor_id=str(actor.get("user_id")),
        actor_role=actor.get("role"),
        occurrences=occurrences,
        route_links=route_links,
        tracking_points=tracking_points,
    )

    alert_recorded = await recorder.record(alert_payload)
    return DeletionResult(delivery_id=delivery_pk, alert_recorded=alert_recorded)
