from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import delivery_api.models  # noqa: F401
from delivery_api.database import Base, get_db
from delivery_api.main import app
from delivery_api.models.company import Company
from delivery_api.models.delivery import Delivery
from delivery_api.models.driver import Driver
from delivery_api.models.user import User
from delivery_api.services.alert_service import AlertRecorder, get_alert_recorder
from delivery_api.services.auth_service import create_access_token

# Company 1: driver Ana is users.id=16 and drivers.id=101.
COMPANY_ID = 1
OTHER_COMPANY_ID = 2
ADMIN_USER_ID = 1
SUPERVISOR_USER_ID = 2
DRIVER_USER_ID = 16
DRIVER_RECORD_ID = 101
OTHER_DRIVER_USER_ID = 17
OTHER_DRIVER_RECORD_ID = 102
UNLINKED_DRIVER_USER_ID = 30
OTHER_COMPANY_ADMIN_ID = 40


# ---------------------------------------------------------------------------
# Actors and tokens
# ---------------------------------------------------------------------------


def make_actor(user_id, role, company_id=COMPANY_ID, full_name=None) -> dict:
    return {
        "id": user_id,
        "user_id": user_id,
        "role": role,
        "company_id": company_id,
        "full_name": full_name,
    }


def bearer(user_id, role, company_id=COMPANY_ID, full_name=None) -> dict:
    token = create_access_token(
        user_id=user_id, company_id=company_id, user_type=role, full_name=full_name
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_actor():
    return make_actor(ADMIN_USER_ID, "ADMIN", full_name="Carla Admin")


@pytest.fixture
def driver_actor():
    return make_actor(DRIVER_USER_ID, "DRIVER", full_name="Ana Motorista")


@pytest.fixture
def admin_headers():
    return bearer(ADMIN_USER_ID, "ADMIN", full_name="Carla Admin")


@pytest.fixture
def driver_headers():
    return bearer(DRIVER_USER_ID, "driver", full_name="Ana Motorista")


# ---------------------------------------------------------------------------
# In-memory database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(db_session):
    """Two companies, their users and the driver records linking them."""
    db_session.add_all(
        [
            Company(id=COMPANY_ID, name="ID Transportes"),
            Company(id=OTHER_COMPANY_ID, name="Outra Transportadora"),
        ]
    )
    await db_session.flush()
    db_session.add_all(
        [
            User(id=ADMIN_USER_ID, company_id=COMPANY_ID, username="carla",
                 full_name="Carla Admin", user_type="ADMIN"),
            User(id=SUPERVISOR_USER_ID, company_id=COMPANY_ID, username="bruno",
                 full_name="Bruno Supervisor", user_type="SUPERVISOR"),
            User(id=DRIVER_USER_ID, company_id=COMPANY_ID, username="ana",
                 full_name="Ana Motorista", user_type="DRIVER"),
            User(id=OTHER_DRIVER_USER_ID, company_id=COMPANY_ID, username="davi",
                 full_name="Davi Motorista", user_type="DRIVER"),
            User(id=UNLINKED_DRIVER_USER_ID, company_id=COMPANY_ID, username="edu",
                 full_name="Edu Sem Cadastro", user_type="DRIVER"),
            User(id=OTHER_COMPANY_ADMIN_ID, company_id=OTHER_COMPANY_ID, username="fabio",
                 full_name="Fabio Admin", user_type="ADMIN"),
        ]
    )
    await db_session.flush()
    db_session.add_all(
        [
            Driver(id=DRIVER_RECORD_ID, user_id=DRIVER_USER_ID, company_id=COMPANY_ID),
            Driver(id=OTHER_DRIVER_RECORD_ID, user_id=OTHER_DRIVER_USER_ID,
                   company_id=COMPANY_ID),
        ]
    )
    await db_session.commit()
    return db_session


def utc_now() -> datetime:
    # Midday keeps "today" and "yesterday" stable for the whole test run.
    now = datetime.utcnow()
    return now.replace(hour=12, minute=0, second=0, microsecond=0)


async def add_delivery(session, id, company_id=COMPANY_ID, created_at=None, **kwargs):
    delivery = Delivery(
        id=id,
        company_id=company_id,
        created_at=created_at or utc_now(),
        **kwargs,
    )
    session.add(delivery)
    await session.commit()
    return delivery


def days_ago(n: int) -> datetime:
    return utc_now() - timedelta(days=n)


# ---------------------------------------------------------------------------
# HTTP client with the test database wired in
# ---------------------------------------------------------------------------


@pytest.fixture
def recorder(session_factory):
    return AlertRecorder(session_factory=session_factory)


@pytest_asyncio.fixture
async def client(session_factory, recorder, seeded):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_alert_recorder] = lambda: recorder
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
