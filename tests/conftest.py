"""Shared fixtures: in-memory SQLite through aiosqlite and a scheduler on a fixed clock."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.db import init_db
from app.models import AvailabilityWindow, Service
from app.repositories.availability import SqlAvailabilityRepository
from app.repositories.bookings import SqlBookingRepository
from app.repositories.services import SqlServiceRepository
from app.repositories.settings import SqlSettingsSource
from app.services.booking_service import BookingScheduler
from app.services.locks import ProviderLockRegistry
from app.services.settings_service import SettingsResolver
from tests.factories import NOW, PROVIDER_ID, add_service, add_window, make_settings


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(engine):
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as s:
        yield s


@pytest.fixture
async def service(session) -> Service:
    """60-minute service assigned to PROVIDER_ID."""
    return await add_service(session, duration_minutes=60, provider_ids=[PROVIDER_ID])


@pytest.fixture
async def monday_hours(session) -> AvailabilityWindow:
    """Weekday-recurring Monday window 09:00-17:00 for PROVIDER_ID."""
    return await add_window(session, "09:00", "17:00", day_of_week=0)


@pytest.fixture
def make_scheduler(session):
    def _make(**kwargs) -> BookingScheduler:
        config = kwargs.pop("config", None) or make_settings()
        kwargs.setdefault("clock", lambda: NOW)
        kwargs.setdefault("locks", ProviderLockRegistry())
        return BookingScheduler(
            settings_resolver=SettingsResolver(SqlSettingsSource(session), config),
            availability=SqlAvailabilityRepository(session),
            bookings=SqlBookingRepository(session),
            services=SqlServiceRepository(session),
            **kwargs,
        )

    return _make


@pytest.fixture
def scheduler(make_scheduler, service, monday_hours) -> BookingScheduler:
    return make_scheduler()
