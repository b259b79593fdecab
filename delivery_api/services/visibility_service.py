# delivery_api/services/visibility_service.py
"""
Delivery visibility rules: which delivery rows an actor may list.

All functions use the caller's session (no commit). The query is always
scoped to the actor's company; there is no cross-tenant path here.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, Select, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from delivery_api.models.delivery import OPEN_STATUSES, Delivery
from delivery_api.models.user import ROLE_DRIVER
from delivery_api.services.identity_service import (
    DriverIdentity,
    coerce_id,
    resolve_driver_identifiers,
)

logger = structlog.get_logger()


@dataclass
class DeliveryFilters:
    status: Optional[str] = None
    client_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    driver_id: Optional[str] = None

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None or self.end_date is not None


def effective_delivery_date():
    """Expected delivery date when set, otherwise the creation date."""
    return func.date(
        func.coalesce(Delivery.delivery_date_expected, Delivery.created_at),
        type_=Date,
    )


def utc_today() -> date:
    return datetime.utcnow().date()


def _driver_id_clause(ids: set[int]):
    return Delivery.driver_id.in_(sorted(ids))


def compose_delivery_query(
    actor: dict,
    filters: DeliveryFilters,
    actor_identity: Optional[DriverIdentity] = None,
    driver_filter_identity: Optional[DriverIdentity] = None,
    today: Optional[date] = None,
) -> Select:
    """Build the scoped SELECT from already-resolved identities."""
    today = today or utc_today()
    is_driver = actor.get("role") == ROLE_DRIVER
    q = select(Delivery).where(Delivery.company_id == coerce_id(actor.get("company_id")))

    if is_driver:
        # Older rows may carry either id space in driver_id.
        ids = {i for i in (coerce_id(actor.get("user_id")),) if i is not None}
        if actor_identity is not None:
            ids |= actor_identity.ids()
        q = q.where(_driver_id_clause(ids))
    elif filters.driver_id:
        if driver_filter_identity is not None:
            q = q.where(_driver_id_clause(driver_filter_identity.ids()))
        else:
            literal = coerce_id(filters.driver_id)
            q = q.where(Delivery.driver_id == literal if literal is not None else false())

    if filters.status:
        q = q.where(func.upper(Delivery.status) == filters.status.strip().upper())

    if filters.client_id:
        client = coerce_id(filters.client_id)
        q = q.where(Delivery.client_id == client if client is not None else false())

    delivery_date = effective_delivery_date()
    if filters.has_date_range:
        if filters.start_date is not None:
            q = q.where(delivery_date >= filters.start_date)
        if filters.end_date is not None:
            q = q.where(delivery_date <= filters.end_date)
    elif not filters.status:
        if is_driver:
            # Unresolved deliveries from earlier days stay on the driver's list.
            q = q.where(
                or_(
                    delivery_date == today,
                    func.upper(Delivery.status).in_(sorted(OPEN_STATUSES)),
                )
            )
        else:
            q = q.where(delivery_date == today)

    return q.order_by(Delivery.created_at.asc(), Delivery.id.asc())


async def build_delivery_query(
    db: AsyncSession,
    actor: dict,
    filters: DeliveryFilters,
    today: Optional[date] = None,
) -> Select:
    """Resolve the identities the rules need, then compose the query."""
    actor_identity = None
    driver_filter_identity = None
    if actor.get("role") == ROLE_DRIVER:
        actor_identity = await resolve_driver_identifiers(
            db, actor.get("user_id"), actor.get("company_id")
        )
        if actor_identity is None:
            logger.info(
                "driver_identity_unresolved",
                user_id=str(actor.get("user_id")),
                company_id=str(actor.get("company_id")),
            )
    elif filters.driver_id:
        driver_filter_identity = await resolve_driver_identifiers(
            db, filters.driver_id, actor.get("company_id")
        )

    return compose_delivery_query(
        actor,
        filters,
        actor_identity=actor_identity,
        driver_filter_identity=driver_filter_identity,
        today=today,
    )


async def list_deliveries(
    db: AsyncSession,
    actor: dict,
    filters: DeliveryFilters,
    today: Optional[date] = None,
) -> list[Delivery]:
    q = await build_delivery_query(db, actor, filters, today=today)
    result = await db.execute(q)
    return list(result.scalars().all())
