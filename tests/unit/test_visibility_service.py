"""
Unit tests for delivery_api/services/visibility_service.py

compose_delivery_query is checked on the compiled PostgreSQL statement;
row-level behaviour lives in tests/integration/test_delivery_visibility.py.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from delivery_api.services.identity_service import DriverIdentity
from delivery_api.services.visibility_service import (
    DeliveryFilters,
    build_delivery_query,
    compose_delivery_query,
)

TODAY = date(2026, 3, 10)
ANA = DriverIdentity(driver_record_id=101, driver_user_id=16)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _actor(role, user_id=16, company_id=1):
    return {"id": user_id, "user_id": user_id, "role": role, "company_id": company_id}


def _compiled(q):
    compiled = q.compile(dialect=postgresql.dialect())
    return str(compiled), compiled.params


# ---------------------------------------------------------------------------
# compose_delivery_query
# ---------------------------------------------------------------------------

def test_always_company_scoped_and_ordered():
    sql, params = _compiled(
        compose_delivery_query(_actor("ADMIN", 1, company_id=3), DeliveryFilters(), today=TODAY)
    )

    assert "delivery_notes.company_id = " in sql
    assert 3 in params.values()
    assert sql.endswith("ORDER BY delivery_notes.created_at ASC, delivery_notes.id ASC")


def test_driver_matches_both_id_spaces():
    sql, params = _compiled(
        compose_delivery_query(_actor("DRIVER"), DeliveryFilters(), actor_identity=ANA, today=TODAY)
    )

    assert "delivery_notes.driver_id IN" in sql
    assert [16, 101] in params.values()


def test_unresolved_driver_falls_back_to_user_id():
    _, params = _compiled(
        compose_delivery_query(_actor("DRIVER", user_id=30), DeliveryFilters(), today=TODAY)
    )
    assert [30] in params.values()


def test_driver_filter_ignored_for_drivers():
    _, params = _compiled(
        compose_delivery_query(
            _actor("DRIVER"), DeliveryFilters(driver_id="102"), actor_identity=ANA, today=TODAY
        )
    )

    assert [16, 101] in params.values()
    assert 102 not in params.values()


def test_driver_default_window_keeps_open_deliveries():
    sql, params = _compiled(
        compose_delivery_query(_actor("DRIVER"), DeliveryFilters(), actor_identity=ANA, today=TODAY)
    )

    assert "coalesce(delivery_notes.delivery_date_expected, delivery_notes.created_at)" in sql
    assert "upper(delivery_notes.status) IN" in sql
    assert TODAY in params.values()


def test_manager_default_window_is_today_only():
    sql, params = _compiled(
        compose_delivery_query(_actor("SUPERVISOR", 2), DeliveryFilters(), today=TODAY)
    )

    assert "upper(delivery_notes.status) IN" not in sql
    assert TODAY in params.values()


def test_status_filter_disables_default_window():
    sql, params = _compiled(
        compose_delivery_query(_actor("ADMIN", 1), DeliveryFilters(status="pending"), today=TODAY)
    )

    assert "upper(delivery_notes.status) = " in sql
    assert "PENDING" in params.values()
    assert "coalesce" not in sql


def test_explicit_range_replaces_default_window():
    filters = DeliveryFilters(start_date=date(2026, 3, 1), end_date=date(2026, 3, 5))
    sql, params = _compiled(compose_delivery_query(_actor("DRIVER"), filters, ANA, today=TODAY))

    assert "upper(delivery_notes.status) IN" not in sql
    assert date(2026, 3, 1) in params.values()
    assert date(2026, 3, 5) in params.values()
    assert TODAY not in params.values()


def test_manager_driver_filter_uses_resolved_identity():
    _, params = _compiled(
        compose_delivery_query(
            _actor("ADMIN", 1),
            DeliveryFilters(driver_id="16"),
            driver_filter_identity=ANA,
            today=TODAY,
        )
    )
    assert [16, 101] in params.values()


def test_manager_driver_filter_unresolved_is_literal():
    sql, params = _compiled(
        compose_delivery_query(_actor("ADMIN", 1), DeliveryFilters(driver_id="555"), today=TODAY)
    )

    assert "delivery_notes.driver_id = " in sql
    assert 555 in params.values()


def test_manager_driver_filter_non_numeric_matches_nothing():
    sql, _ = _compiled(
        compose_delivery_query(_actor("ADMIN", 1), DeliveryFilters(driver_id="abc"), today=TODAY)
    )
    assert "false" in sql


# ---------------------------------------------------------------------------
# build_delivery_query
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_build_resolves_driver_identity_once():
    session = AsyncMock()
    result = MagicMock()
    result.first.return_value = (101, 16)
    session.execute.return_value = result

    q = await build_delivery_query(session, _actor("DRIVER"), DeliveryFilters(), today=TODAY)

    session.execute.assert_awaited_once()
    assert [16, 101] in _compiled(q)[1].values()


@pytest.mark.asyncio
async def test_build_skips_lookup_for_manager_without_driver_filter():
    session = AsyncMock()

    await build_delivery_query(session, _actor("ADMIN", 1), DeliveryFilters(), today=TODAY)

    session.execute.assert_not_awaited()
