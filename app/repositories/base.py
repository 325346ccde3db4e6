"""Storage contracts the scheduling core depends on.

The scheduler only talks to these protocols; app/repositories/* provide the
SQLModel-backed implementations used by the API.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from app.models.availability import AvailabilityWindow
from app.models.booking import Booking


@dataclass(frozen=True)
class ServiceInfo:
    id: int
    duration_minutes: int
    assigned_provider_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def is_unassigned(self) -> bool:
        return not self.assigned_provider_ids


class AvailabilityRepository(Protocol):
    async def windows_for(self, provider_id: int, d: date) -> list[AvailabilityWindow]:
        """Date-specific rows for d plus the provider's weekday-recurring rows."""
        ...


class BookingRepository(Protocol):
    async def active_bookings_for(self, provider_id: int, d: date) -> list[Booking]:
        """Non-cancelled bookings that can touch d, including ones started the day before."""
        ...

    async def get(self, booking_id: uuid.UUID) -> Booking | None: ...

    async def insert(self, booking: Booking) -> Booking: ...

    async def insert_many(self, bookings: list[Booking]) -> list[Booking]:
        """All rows in one transaction, or none."""
        ...

    async def update(self, booking: Booking) -> Booking: ...

    async def delete(self, booking: Booking) -> None: ...

    async def blocked_for(self, provider_id: int, d: date) -> list[Booking]:
        """Blocked-time rows starting on d, earliest first."""
        ...


class ServiceRepository(Protocol):
    async def get(self, service_id: int) -> ServiceInfo | None: ...

    async def unassigned_ids(self, service_ids: set[int]) -> set[int]:
        """Subset of service_ids whose service has no assigned provider."""
        ...


class SettingsSource(Protocol):
    async def get_value(self, category: str, key: str) -> str | None: ...
