"""
Unit tests for delivery_api/services/alert_service.py

normalize_alert is pure; AlertRecorder is driven with a mocked session
factory so write failures can be simulated.
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from delivery_api.services.alert_service import (
    AlertRecord,
    AlertRecorder,
    build_description,
    normalize_alert,
)

NOW = datetime(2026, 3, 10, 15, 30, 0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _db_error() -> OperationalError:
    return OperationalError("INSERT", {}, Exception("connection refused"))


def _factory_for(session) -> MagicMock:
    """Session factory whose sessions work as ``async with`` blocks."""
    cm = MagicMock()
    cm.__aenter__.return_value = session
    cm.__aexit__.return_value = False
    return MagicMock(return_value=cm)


def _record(company_id, identifier="a1") -> AlertRecord:
    return AlertRecord(
        id=None,
        identifier=identifier,
        type="delivery_deleted",
        severity="danger",
        title="Entrega excluida",
        description=None,
        company_id=company_id,
        delivery_id="7",
        nf_number=None,
        driver_id=None,
        driver_name=None,
        vehicle_label=None,
        actor_id="16",
        actor_name=None,
        actor_role="DRIVER",
        occurred_at=NOW,
    )


# ---------------------------------------------------------------------------
# normalize_alert
# ---------------------------------------------------------------------------

def test_delivery_deleted_defaults():
    values = normalize_alert(
        {"type": "delivery_deleted", "company_id": "1", "delivery_id": 7}, now=NOW
    )

    assert values["severity"] == "danger"
    assert values["title"] == "Entrega excluida"
    assert values["description"] == "Entrega removida"
    assert values["company_id"] == 1
    assert values["delivery_id"] == "7"
    assert values["occurred_at"] == NOW
    assert len(values["identifier"]) == 32


def test_other_types_default_to_info():
    values = normalize_alert({"type": "route_delayed"}, now=NOW)

    assert values["severity"] == "info"
    assert values["title"] == "Alerta operacional"
    assert values["description"] is None


def test_explicit_fields_win():
    values = normalize_alert(
        {
            "type": "delivery_deleted",
            "identifier": "abc123",
            "severity": "warning",
            "title": "Custom",
            "message": "Removida no app",
        },
        now=NOW,
    )

    assert values["identifier"] == "abc123"
    assert values["severity"] == "warning"
    assert values["title"] == "Custom"
    assert values["description"] == "Removida no app"


def test_driver_deletion_description():
    values = normalize_alert(
        {
            "type": "delivery_deleted",
            "nf_number": "12345",
            "driver_name": "Ana Motorista",
            "vehicle_label": "ABC1D23 (Fiorino)",
            "actor_name": "ana motorista",
            "actor_role": "DRIVER",
        },
        now=NOW,
    )

    assert values["description"] == (
        "Entrega removida pelo motorista | NF 12345 | Motorista: Ana Motorista"
        " | Veiculo: ABC1D23 (Fiorino)"
    )


def test_description_names_actor_when_not_the_driver():
    description = build_description(
        "Entrega removida", "9", "Ana Motorista", None, "Carla Admin"
    )
    assert description == "Entrega removida | NF 9 | Motorista: Ana Motorista | Acao por: Carla Admin"


def test_occurred_at_parsed_as_naive_utc():
    values = normalize_alert({"occurred_at": "2026-03-10T12:00:00-03:00"}, now=NOW)
    assert values["occurred_at"] == datetime(2026, 3, 10, 15, 0, 0)


def test_unparseable_occurred_at_falls_back_to_now():
    values = normalize_alert({"occurred_at": "yesterday"}, now=NOW)
    assert values["occurred_at"] == NOW


# ---------------------------------------------------------------------------
# AlertRecorder.record
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_record_returns_false_when_write_fails():
    session = AsyncMock()
    session.add = MagicMock()
    session.commit.side_effect = _db_error()
    recorder = AlertRecorder(session_factory=_factory_for(session))

    recorded = await recorder.record({"type": "delivery_deleted", "delivery_id": 7})

    assert recorded is False
    session.add.assert_called_once()
    assert recorder.cached() == []


@pytest.mark.asyncio
async def test_record_returns_false_when_session_cannot_open():
    factory = MagicMock(side_effect=RuntimeError("pool exhausted"))
    recorder = AlertRecorder(session_factory=factory)

    assert await recorder.record({"type": "delivery_deleted"}) is False


@pytest.mark.asyncio
async def test_record_survives_cache_refresh_failure():
    session = AsyncMock()
    session.add = MagicMock()
    session.execute.side_effect = _db_error()
    recorder = AlertRecorder(session_factory=_factory_for(session))

    recorded = await recorder.record({"type": "delivery_deleted", "delivery_id": 7})

    assert recorded is True
    session.commit.assert_awaited_once()


# ---------------------------------------------------------------------------
# AlertRecorder.recent
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_recent_falls_back_to_company_cache():
    recorder = AlertRecorder(session_factory=MagicMock())
    recorder._cache = [_record(1, "a1"), _record(2, "b1"), _record(1, "a2")]
    db = AsyncMock()
    db.execute.side_effect = _db_error()

    alerts = await recorder.recent(db, "1", limit=20)

    assert [a.identifier for a in alerts] == ["a1", "a2"]
    db.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_recent_cache_fallback_respects_limit():
    recorder = AlertRecorder(session_factory=MagicMock())
    recorder._cache = [_record(1, f"a{i}") for i in range(5)]
    db = AsyncMock()
    db.execute.side_effect = _db_error()

    alerts = await recorder.recent(db, 1, limit=2)

    assert len(alerts) == 2
