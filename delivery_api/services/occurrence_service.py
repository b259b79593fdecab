# delivery_api/services/occurrence_service.py
"""Delivery occurrences (redelivery, refusal, damage) reported from the field."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, delete, false, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from delivery_api.errors import NotFoundError
from delivery_api.models.delivery import Delivery, DeliveryOccurrence
from delivery_api.models.user import ROLE_DRIVER, User
from delivery_api.services.identity_service import (
    actor_identity_ids,
    coerce_id,
    resolve_driver_identifiers,
)

OCCURRENCE_REDELIVERY = "reentrega"
OCCURRENCE_REFUSAL = "recusa"
OCCURRENCE_DAMAGE = "avaria"
OCCURRENCE_TYPES = frozenset({OCCURRENCE_REDELIVERY, OCCURRENCE_REFUSAL, OCCURRENCE_DAMAGE})


def _occurrence_select():
    """Occurrence with its note number, driver and author names and client."""
    driver_user = aliased(User)
    author = aliased(User)
    return (
        select(
            DeliveryOccurrence,
            Delivery.nf_number,
            driver_user.full_name.label("driver_name"),
            author.full_name.label("created_by_name"),
            Delivery.client_name_extracted.label("client_name"),
            Delivery.client_address,
        )
        .outerjoin(Delivery, Delivery.id == DeliveryOccurrence.delivery_id)
        .outerjoin(driver_user, driver_user.id == DeliveryOccurrence.driver_id)
        .outerjoin(author, author.id == DeliveryOccurrence.created_by)
    )


async def list_occurrences(
    db: AsyncSession,
    actor: dict,
    occurrence_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    driver_id: Optional[str] = None,
) -> list:
    """Rows of (occurrence, nf_number, driver_name, created_by_name,
    client_name, client_address), newest first."""
    company_id = coerce_id(actor.get("company_id"))
    q = _occurrence_select().where(DeliveryOccurrence.company_id == company_id)

    if actor.get("role") == ROLE_DRIVER:
        identity = await resolve_driver_identifiers(db, actor.get("user_id"), company_id)
        q = q.where(
            DeliveryOccurrence.driver_id.in_(sorted(actor_identity_ids(actor, identity)))
        )
    elif driver_id:
        identity = await resolve_driver_identifiers(db, driver_id, company_id)
        if identity is not None:
            q = q.where(DeliveryOccurrence.driver_id.in_(sorted(identity.ids())))
        else:
            literal = coerce_id(driver_id)
            q = q.where(
                DeliveryOccurrence.driver_id == literal if literal is not None else false()
            )

    if occurrence_type:
        q = q.where(DeliveryOccurrence.type == occurrence_type)
    created_on = func.date(DeliveryOccurrence.created_at, type_=Date)
    if start_date:
        q = q.where(created_on >= start_date)
    if end_date:
        q = q.where(created_on <= end_date)

    result = await db.execute(
        q.order_by(DeliveryOccurrence.created_at.desc(), DeliveryOccurrence.id.desc())
    )
    return list(result.all())


async def get_occurrence(db: AsyncSession, occurrence_id, actor: dict):
    """One ``list_occurrences``-shaped row in the actor's company, or NotFoundError."""
    occurrence = coerce_id(occurrence_id)
    if occurrence is None:
        raise NotFoundError("Occurrence not found")
    result = await db.execute(
        _occurrence_select().where(
            DeliveryOccurrence.id == occurrence,
            DeliveryOccurrence.company_id == coerce_id(actor.get("company_id")),
        )
    )
    row = result.first()
    if row is None:
        raise NotFoundError("Occurrence not found")
    if actor.get("role") == ROLE_DRIVER:
        identity = await resolve_driver_identifiers(
            db, actor.get("user_id"), actor.get("company_id")
        )
        if row[0].driver_id not in actor_identity_ids(actor, identity):
            raise NotFoundError("Occurrence not found")
    return row


async def occurrences_for_delivery(
    db: AsyncSession, delivery_id: int
) -> list[DeliveryOccurrence]:
    result = await db.execute(
        select(DeliveryOccurrence)
        .where(DeliveryOccurrence.delivery_id == delivery_id)
        .order_by(DeliveryOccurrence.created_at.desc(), DeliveryOccurrence.id.desc())
    )
    return list(result.scalars().all())


async def delete_occurrences_for_delivery(db: AsyncSession, delivery_id: int) -> int:
    result = await db.execute(
        delete(DeliveryOccurrence).where(DeliveryOccurrence.delivery_id == delivery_id)
    )
    return result.rowcount or 0
