# delivery_api/services/identity_service.py
"""
Driver identity resolution across the users and drivers id spaces.

The same person may appear in delivery rows as a ``drivers.id`` or as a
``users.id``. Every lookup here returns both so callers can match against
the union. Resolution only narrows scope; it never raises.
"""

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import case, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from delivery_api.models.driver import Driver

logger = structlog.get_logger()


@dataclass(frozen=True)
class DriverIdentity:
    driver_record_id: Optional[int] = None
    driver_user_id: Optional[int] = None

    def ids(self) -> set[int]:
        return {i for i in (self.driver_record_id, self.driver_user_id) if i is not None}


def coerce_id(value: Any) -> Optional[int]:
    """Integer id from a token claim, path param or query string; None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text_value = str(value).strip()
    if not text_value.isdigit():
        return None
    return int(text_value)


async def resolve_driver_identifiers(
    db: AsyncSession, raw_id: Any, company_id: Any
) -> Optional[DriverIdentity]:
    """
    Resolve ``raw_id`` (drivers.id or users.id, caller does not know which)
    to the canonical driver record id and the driver's user id.

    Returns None when nothing matches, when either argument is missing, or
    when the lookup fails.
    """
    candidate = coerce_id(raw_id)
    company = coerce_id(company_id)
    if candidate is None or company is None:
        return None

    try:
        result = await db.execute(
            select(Driver.id, Driver.user_id)
            .where(
                or_(Driver.id == candidate, Driver.user_id == candidate),
                Driver.company_id == company,
            )
            # A users.id match outranks a drivers.id that merely collides with it.
            .order_by(case((Driver.user_id == candidate, 0), else_=1), Driver.id)
            .limit(1)
        )
        row = result.first()
    except SQLAlchemyError as e:
        logger.warning(
            "driver_identity_lookup_failed",
            raw_id=str(raw_id),
            company_id=str(company_id),
            error=str(e),
        )
        return None

    if row is None:
        return None
    return DriverIdentity(driver_record_id=row[0], driver_user_id=row[1])


def actor_identity_ids(actor: dict, identity: Optional[DriverIdentity]) -> set[int]:
    """Every id the actor may appear under in a delivery row."""
    ids = {
        i
        for i in (coerce_id(actor.get("id")), coerce_id(actor.get("user_id")))
        if i is not None
    }
    if identity is not None:
        ids |= identity.ids()
    return ids
