"""
Visibility rules against a real (SQLite) database.

Ana is users.id=16 and drivers.id=101 in company 1; delivery rows may
reference her by either id.
"""

from datetime import timedelta

import pytest

from delivery_api.models.driver import Driver
from delivery_api.services.visibility_service import DeliveryFilters, list_deliveries

from conftest import (
    COMPANY_ID,
    DRIVER_RECORD_ID,
    DRIVER_USER_ID,
    OTHER_COMPANY_ADMIN_ID,
    OTHER_COMPANY_ID,
    OTHER_DRIVER_RECORD_ID,
    OTHER_DRIVER_USER_ID,
    UNLINKED_DRIVER_USER_ID,
    add_delivery,
    days_ago,
    make_actor,
    utc_now,
)


def _ids(deliveries):
    return [d.id for d in deliveries]


@pytest.mark.asyncio
async def test_driver_sees_delivery_assigned_by_driver_record_id(seeded, driver_actor):
    await add_delivery(seeded, 5, driver_id=DRIVER_RECORD_ID, status="IN_TRANSIT")
    await add_delivery(seeded, 6, driver_id=999, status="PENDING")

    rows = await list_deliveries(seeded, driver_actor, DeliveryFilters())

    assert _ids(rows) == [5]


@pytest.mark.asyncio
async def test_driver_sees_both_id_spaces(seeded, driver_actor):
    await add_delivery(seeded, 1, driver_id=DRIVER_RECORD_ID)
    await add_delivery(seeded, 2, driver_id=DRIVER_USER_ID)
    await add_delivery(seeded, 3, driver_id=OTHER_DRIVER_RECORD_ID)

    rows = await list_deliveries(seeded, driver_actor, DeliveryFilters())

    assert _ids(rows) == [1, 2]


@pytest.mark.asyncio
async def test_driver_without_driver_record_matches_user_id_only(seeded):
    actor = make_actor(UNLINKED_DRIVER_USER_ID, "DRIVER")
    await add_delivery(seeded, 1, driver_id=UNLINKED_DRIVER_USER_ID)
    await add_delivery(seeded, 2, driver_id=130)

    rows = await list_deliveries(seeded, actor, DeliveryFilters())

    assert _ids(rows) == [1]


@pytest.mark.asyncio
async def test_driver_ignores_driver_id_filter(seeded, driver_actor):
    await add_delivery(seeded, 1, driver_id=DRIVER_RECORD_ID)
    await add_delivery(seeded, 2, driver_id=OTHER_DRIVER_RECORD_ID)

    rows = await list_deliveries(
        seeded, driver_actor, DeliveryFilters(driver_id=str(OTHER_DRIVER_RECORD_ID))
    )

    assert _ids(rows) == [1]


@pytest.mark.asyncio
async def test_admin_sees_nothing_when_only_yesterdays_pending_exists(seeded, admin_actor):
    await add_delivery(seeded, 1, driver_id=DRIVER_RECORD_ID, created_at=days_ago(1))

    rows = await list_deliveries(seeded, admin_actor, DeliveryFilters())

    assert rows == []


@pytest.mark.asyncio
async def test_driver_keeps_unfinished_deliveries_from_earlier_days(seeded, driver_actor):
    await add_delivery(seeded, 1, driver_id=DRIVER_RECORD_ID, status="PENDING",
                       created_at=days_ago(3))
    await add_delivery(seeded, 2, driver_id=DRIVER_RECORD_ID, status="em_andamento",
                       created_at=days_ago(2))
    await add_delivery(seeded, 3, driver_id=DRIVER_RECORD_ID, status="DELIVERED",
                       created_at=days_ago(1))
    await add_delivery(seeded, 4, driver_id=DRIVER_RECORD_ID, status="DELIVERED")

    rows = await list_deliveries(seeded, driver_actor, DeliveryFilters())

    assert _ids(rows) == [1, 2, 4]


@pytest.mark.asyncio
async def test_expected_date_takes_precedence_over_creation(seeded, admin_actor):
    today = utc_now().date()
    await add_delivery(seeded, 1, created_at=days_ago(2), delivery_date_expected=today)
    await add_delivery(seeded, 2, delivery_date_expected=today + timedelta(days=1))
    await add_delivery(seeded, 3)

    rows = await list_deliveries(seeded, admin_actor, DeliveryFilters())

    assert _ids(rows) == [1, 3]


@pytest.mark.asyncio
async def test_status_filter_is_case_insensitive_and_skips_date_window(seeded, admin_actor):
    await add_delivery(seeded, 1, status="PENDING", created_at=days_ago(10))
    await add_delivery(seeded, 2, status="pending")
    await add_delivery(seeded, 3, status="DELIVERED")

    rows = await list_deliveries(seeded, admin_actor, DeliveryFilters(status="Pending"))

    assert _ids(rows) == [1, 2]


@pytest.mark.asyncio
async def test_explicit_date_range(seeded, admin_actor):
    await add_delivery(seeded, 1, created_at=days_ago(5))
    await add_delivery(seeded, 2, created_at=days_ago(3))
    await add_delivery(seeded, 3, created_at=days_ago(1))

    filters = DeliveryFilters(start_date=days_ago(4).date(), end_date=days_ago(2).date())
    rows = await list_deliveries(seeded, admin_actor, filters)

    assert _ids(rows) == [2]


@pytest.mark.asyncio
async def test_open_ended_date_range(seeded, admin_actor):
    await add_delivery(seeded, 1, created_at=days_ago(5))
    await add_delivery(seeded, 2, created_at=days_ago(1))

    rows = await list_deliveries(
        seeded, admin_actor, DeliveryFilters(start_date=days_ago(2).date())
    )

    assert _ids(rows) == [2]


@pytest.mark.asyncio
async def test_manager_driver_filter_by_user_id_finds_both_id_spaces(seeded, admin_actor):
    await add_delivery(seeded, 1, driver_id=DRIVER_RECORD_ID)
    await add_delivery(seeded, 2, driver_id=DRIVER_USER_ID)
    await add_delivery(seeded, 3, driver_id=OTHER_DRIVER_RECORD_ID)

    by_user = await list_deliveries(
        seeded, admin_actor, DeliveryFilters(driver_id=str(DRIVER_USER_ID))
    )
    by_record = await list_deliveries(
        seeded, admin_actor, DeliveryFilters(driver_id=str(DRIVER_RECORD_ID))
    )

    assert _ids(by_user) == _ids(by_record) == [1, 2]


@pytest.mark.asyncio
async def test_manager_driver_filter_unresolved_uses_literal(seeded, admin_actor):
    await add_delivery(seeded, 1, driver_id=555)
    await add_delivery(seeded, 2, driver_id=556)

    rows = await list_deliveries(seeded, admin_actor, DeliveryFilters(driver_id="555"))
    assert _ids(rows) == [1]

    rows = await list_deliveries(seeded, admin_actor, DeliveryFilters(driver_id="abc"))
    assert rows == []


@pytest.mark.asyncio
async def test_client_filter(seeded, admin_actor):
    await add_delivery(seeded, 1, client_id=42)
    await add_delivery(seeded, 2, client_id=43)

    rows = await list_deliveries(seeded, admin_actor, DeliveryFilters(client_id="42"))

    assert _ids(rows) == [1]


@pytest.mark.asyncio
async def test_results_ordered_by_creation(seeded, admin_actor):
    now = utc_now()
    await add_delivery(seeded, 1, created_at=now + timedelta(hours=2))
    await add_delivery(seeded, 2, created_at=now - timedelta(hours=2))
    await add_delivery(seeded, 3, created_at=now)

    rows = await list_deliveries(seeded, admin_actor, DeliveryFilters())

    assert _ids(rows) == [2, 3, 1]


@pytest.mark.asyncio
async def test_tenant_isolation(seeded):
    await add_delivery(seeded, 1, company_id=COMPANY_ID, driver_id=DRIVER_RECORD_ID)
    await add_delivery(seeded, 2, company_id=OTHER_COMPANY_ID, driver_id=DRIVER_RECORD_ID)

    wide = DeliveryFilters(start_date=days_ago(30).date(), end_date=days_ago(-30).date())
    other_admin = make_actor(OTHER_COMPANY_ADMIN_ID, "ADMIN", company_id=OTHER_COMPANY_ID)
    ana = make_actor(DRIVER_USER_ID, "DRIVER")

    assert _ids(await list_deliveries(seeded, other_admin, wide)) == [2]
    assert _ids(await list_deliveries(seeded, ana, wide)) == [1]
    assert _ids(
        await list_deliveries(
            seeded, other_admin, DeliveryFilters(driver_id=str(DRIVER_USER_ID))
        )
    ) == []


@pytest.mark.asyncio
async def test_driver_not_shown_colleague_delivery_through_colliding_record_id(
    seeded, driver_actor
):
    seeded.add(Driver(id=DRIVER_USER_ID, user_id=OTHER_DRIVER_USER_ID, company_id=COMPANY_ID))
    await seeded.commit()
    await add_delivery(seeded, 1, driver_id=DRIVER_RECORD_ID)
    await add_delivery(seeded, 900, driver_id=OTHER_DRIVER_USER_ID)

    rows = await list_deliveries(seeded, driver_actor, DeliveryFilters())

    assert _ids(rows) == [1]
