import os
from collections.abc import AsyncGenerator
from datetime import time

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Load environment variables from .env file, then pin what tests rely on
load_dotenv()
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./clinic_scheduling_test.db")
os.environ["LOCK_BACKEND"] = "memory"
os.environ.pop("REDIS_URL", None)

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import insert  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from support import (  # noqa: E402
    NOW,
    OTHER_PATIENT_ID,
    OTHER_PROVIDER_ID,
    PATIENT_ID,
    PROVIDER_ID,
    SCENARIO_DATE,
    InMemoryAppointmentStore,
    StaticPatientDirectory,
    StaticProviderDirectory,
)

from clinic_scheduling.core.clock import FixedClock  # noqa: E402
from clinic_scheduling.core.locks import InProcessKeyedLock  # noqa: E402
from clinic_scheduling.database import get_db  # noqa: E402
from clinic_scheduling.dependencies import (  # noqa: E402
    get_cache_manager,
    get_clock,
    get_keyed_lock,
)
from clinic_scheduling.main import app  # noqa: E402
from clinic_scheduling.models import metadata, patients, providers  # noqa: E402
from clinic_scheduling.services.appointment_service import AppointmentService  # noqa: E402


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen a week before the scenario date."""
    return FixedClock(NOW)


@pytest.fixture
def store() -> InMemoryAppointmentStore:
    return InMemoryAppointmentStore()


@pytest.fixture
def service(store: InMemoryAppointmentStore, clock: FixedClock) -> AppointmentService:
    """Scheduling service wired to in-memory collaborators."""
    return AppointmentService(
        repository=store,
        patients=StaticPatientDirectory({PATIENT_ID, OTHER_PATIENT_ID}),
        providers=StaticProviderDirectory(
            {
                PROVIDER_ID: {"id": PROVIDER_ID, "full_name": "Dr. Mara Quint"},
                OTHER_PROVIDER_ID: {"id": OTHER_PROVIDER_ID, "full_name": "Dr. Ilse Brandt"},
            }
        ),
        locks=InProcessKeyedLock(),
        clock=clock,
    )


@pytest.fixture
def appointment_data() -> dict:
    """Valid request: provider 1 on the scenario date at 09:00 for 30 minutes."""
    return {
        "patient_id": PATIENT_ID,
        "provider_id": PROVIDER_ID,
        "appointment_date": SCENARIO_DATE,
        "appointment_time": time(9, 0),
        "duration_minutes": 30,
        "reason": "Annual physical",
        "notes": "Fasting since midnight",
    }


@pytest_asyncio.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh SQLite database with two patients and two providers."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'scheduling.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        await conn.execute(
            insert(patients),
            [
                {"id": PATIENT_ID, "full_name": "Jonah Reyes"},
                {"id": OTHER_PATIENT_ID, "full_name": "Priya Nandakumar"},
            ],
        )
        await conn.execute(
            insert(providers),
            [
                {"id": PROVIDER_ID, "full_name": "Dr. Mara Quint", "specialization": "Family"},
                {"id": OTHER_PROVIDER_ID, "full_name": "Dr. Ilse Brandt", "specialization": "ENT"},
            ],
        )

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    clock: FixedClock,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, bound to the test database and clock."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    locks = InProcessKeyedLock()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_keyed_lock] = lambda: locks
    app.dependency_overrides[get_cache_manager] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_appointment_data() -> dict:
    """JSON body for the 09:00 scenario appointment."""
    return {
        "patient_id": PATIENT_ID,
        "provider_id": PROVIDER_ID,
        "appointment_date": SCENARIO_DATE.isoformat(),
        "appointment_time": "09:00:00",
        "duration_minutes": 30,
        "reason": "Annual physical",
        "notes": "Fasting since midnight",
    }
