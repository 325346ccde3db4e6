from datetime import UTC, datetime

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_session
from app.repositories.availability import SqlAvailabilityRepository
from app.repositories.bookings import SqlBookingRepository
from app.repositories.services import SqlServiceRepository
from app.repositories.settings import SqlSettingsSource
from app.services.booking_service import BookingScheduler
from app.services.locks import ProviderLockRegistry
from app.services.settings_service import SettingsResolver

# One registry per process so every request for a provider shares its lock
provider_locks = ProviderLockRegistry()


def get_provider_locks() -> ProviderLockRegistry:
    return provider_locks


def to_naive_utc(dt: datetime) -> datetime:
    """Convert to the naive canonical clock used by TIMESTAMP WITHOUT TIME ZONE columns."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


async def get_scheduler(
    session: AsyncSession = Depends(get_session),
    locks: ProviderLockRegistry = Depends(get_provider_locks),
) -> BookingScheduler:
    return BookingScheduler(
        settings_resolver=SettingsResolver(SqlSettingsSource(session), settings),
        availability=SqlAvailabilityRepository(session),
        bookings=SqlBookingRepository(session),
        services=SqlServiceRepository(session),
        locks=locks,
        recurrence_policy=settings.recurrence_policy,
        skip_conflicts_for_unassigned_services=settings.skip_conflicts_for_unassigned_services,
    )
