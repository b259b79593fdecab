# delivery_api/services/alert_service.py
"""
Operational alerts (currently: delivery removed).

Alerts are written through their own session so a failed write can never
roll back the business operation that triggered it. After each write the
process keeps the most recent rows in memory; that buffer is global, not
per company, and is only read when storage is unreachable.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from delivery_api.config import settings
from delivery_api.database import AsyncSessionLocal
from delivery_api.models.alert import OperationalAlert
from delivery_api.models.user import ROLE_DRIVER
from delivery_api.services.identity_service import coerce_id

logger = structlog.get_logger()

ALERT_DELIVERY_DELETED = "delivery_deleted"

DEFAULT_TITLES = {
    ALERT_DELIVERY_DELETED: "Entrega excluida",
}
DEFAULT_TITLE = "Alerta operacional"


@dataclass(frozen=True)
class AlertRecord:
    id: Optional[int]
    identifier: str
    type: str
    severity: str
    title: str
    description: Optional[str]
    company_id: Optional[int]
    delivery_id: Optional[str]
    nf_number: Optional[str]
    driver_id: Optional[str]
    driver_name: Optional[str]
    vehicle_label: Optional[str]
    actor_id: Optional[str]
    actor_name: Optional[str]
    actor_role: Optional[str]
    occurred_at: datetime

    @classmethod
    def from_row(cls, row: OperationalAlert) -> "AlertRecord":
        return cls(
            id=row.id,
            identifier=row.identifier,
            type=row.type,
            severity=row.severity,
            title=row.title,
            description=row.description,
            company_id=row.company_id,
            delivery_id=row.delivery_id,
            nf_number=row.nf_number,
            driver_id=row.driver_id,
            driver_name=row.driver_name,
            vehicle_label=row.vehicle_label,
            actor_id=row.actor_id,
            actor_name=row.actor_name,
            actor_role=row.actor_role,
            occurred_at=row.occurred_at,
        )


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text_value = str(value).strip()
    return text_value or None


def _parse_occurred_at(value: Any, now: datetime) -> datetime:
    """Naive UTC datetime from an ISO string or datetime, else ``now``."""
    parsed = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            parsed = None
    if parsed is None:
        return now
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _default_message(alert_type: str, actor_role: Optional[str]) -> Optional[str]:
    if alert_type != ALERT_DELIVERY_DELETED:
        return None
    if actor_role == ROLE_DRIVER:
        return "Entrega removida pelo motorista"
    return "Entrega removida"


def build_description(
    message: Optional[str],
    nf_number: Optional[str],
    driver_name: Optional[str],
    vehicle_label: Optional[str],
    actor_name: Optional[str],
) -> Optional[str]:
    parts = []
    if message:
        parts.append(message)
    if nf_number:
        parts.append(f"NF {nf_number}")
    if driver_name:
        parts.append(f"Motorista: {driver_name}")
    if vehicle_label:
        parts.append(f"Veiculo: {vehicle_label}")
    if actor_name and actor_name.casefold() != (driver_name or "").casefold():
        parts.append(f"Acao por: {actor_name}")
    return " | ".join(parts) or None


def normalize_alert(payload: dict, now: Optional[datetime] = None) -> dict:
    """Fill defaults and return the column values for an OperationalAlert row."""
    now = now or datetime.utcnow()
    alert_type = _str_or_none(payload.get("type")) or "info"
    actor_role = _str_or_none(payload.get("actor_role"))
    driver_name = _str_or_none(payload.get("driver_name"))
    actor_name = _str_or_none(payload.get("actor_name"))
    nf_number = _str_or_none(payload.get("nf_number"))
    vehicle_label = _str_or_none(payload.get("vehicle_label"))
    message = (
        _str_or_none(payload.get("message"))
        or _str_or_none(payload.get("description"))
        or _default_message(alert_type, actor_role)
    )

    severity = _str_or_none(payload.get("severity"))
    if severity is None:
        severity = "danger" if alert_type == ALERT_DELIVERY_DELETED else "info"

    return {
        "identifier": _str_or_none(payload.get("identifier")) or uuid.uuid4().hex,
        "type": alert_type,
        "severity": severity,
        "title": _str_or_none(payload.get("title"))
        or DEFAULT_TITLES.get(alert_type, DEFAULT_TITLE),
        "description": build_description(
            message, nf_number, driver_name, vehicle_label, actor_name
        ),
        "company_id": coerce_id(payload.get("company_id")),
        "delivery_id": _str_or_none(payload.get("delivery_id")),
        "nf_number": nf_number,
        "driver_id": _str_or_none(payload.get("driver_id")),
        "driver_name": driver_name,
        "vehicle_label": vehicle_label,
        "actor_id": _str_or_none(payload.get("actor_id")),
        "actor_name": actor_name,
        "actor_role": actor_role,
        "occurred_at": _parse_occurred_at(payload.get("occurred_at"), now),
    }


class AlertRecorder:
    def __init__(self, session_factory=None, cache_size: Optional[int] = None):
        self._session_factory = session_factory
        self.cache_size = cache_size or settings.ALERT_CACHE_SIZE
        self._cache: list[AlertRecord] = []

    def _new_session(self) -> AsyncSession:
        factory = self._session_factory or AsyncSessionLocal
        return factory()

    def cached(self) -> list[AlertRecord]:
        return list(self._cache)

    def clear(self) -> None:
        self._cache = []

    async def refresh(self, session: AsyncSession) -> None:
        result = await session.execute(
            select(OperationalAlert)
            .order_by(OperationalAlert.occurred_at.desc(), OperationalAlert.id.desc())
            .limit(self.cache_size)
        )
        self._cache = [AlertRecord.from_row(row) for row in result.scalars().all()]

    async def record(self, payload: dict) -> bool:
        """Persist an alert. Never raises; returns False when the write failed."""
        try:
            values = normalize_alert(payload)
            async with self._new_session() as session:
                session.add(OperationalAlert(**values))
                await session.commit()
                try:
                    await self.refresh(session)
                except SQLAlchemyError as e:
                    logger.warning("alert_cache_refresh_failed", error=str(e))
        except Exception as e:
            logger.error(
                "alert_record_failed",
                alert_type=payload.get("type"),
                delivery_id=str(payload.get("delivery_id")),
                error=str(e),
            )
            return False

        logger.info(
            "alert_recorded",
            alert_type=values["type"],
            company_id=values["company_id"],
            delivery_id=values["delivery_id"],
        )
        return True

    async def recent(
        self, db: AsyncSession, company_id: Any, limit: int = 20
    ) -> list[AlertRecord]:
        """Most recent alerts for a company, newest first."""
        company = coerce_id(company_id)
        limit = max(1, min(limit, settings.ALERT_LIST_MAX))
        try:
            result = await db.execute(
                select(OperationalAlert)
                .where(OperationalAlert.company_id == company)
                .order_by(
                    OperationalAlert.occurred_at.desc(), OperationalAlert.id.desc()
                )
                .limit(limit)
            )
            return [AlertRecord.from_row(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.warning(
                "alert_listing_from_cache", company_id=company, error=str(e)
            )
            await db.rollback()
            return [a for a in self._cache if a.company_id == company][:limit]


alert_recorder = AlertRecorder()


def get_alert_recorder() -> AlertRecorder:
    """FastAPI dependency returning the process-wide recorder."""
    return alert_recorder
