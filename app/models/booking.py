import uuid
from datetime import UTC, datetime, timedelta
from enum import Enum

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    BLOCKED = "blocked"  # staff-blocked provider time, occupies the slot


TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


class RecurringType(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    customer_id: int = Field(index=True)
    provider_id: int = Field(index=True)
    service_id: int | None = Field(default=None, foreign_key="services.id", index=True)  # None for blocked time
    start_time: datetime = Field(index=True)
    end_time: datetime
    duration_minutes: int
    status: BookingStatus = Field(default=BookingStatus.PENDING, index=True)
    recurring_type: RecurringType = RecurringType.NONE
    recurring_count: int = 0
    recurring_parent_id: uuid.UUID | None = Field(default=None, foreign_key="bookings.id", index=True)
    location: int | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=_utc_naive_now)

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end_time and end > self.start_time

    def move_to(self, start: datetime, duration_minutes: int) -> None:
        """Keep end_time == start_time + duration_minutes."""
        self.start_time = start
        self.duration_minutes = duration_minutes
        self.end_time = start + timedelta(minutes=duration_minutes)


class BookingCreate(SQLModel):
    customer_id: int
    provider_id: int
    service_id: int
    start_time: datetime
    duration_minutes: int | None = None  # falls back to the service baseline
    status: BookingStatus = BookingStatus.PENDING
    recurring_type: RecurringType = RecurringType.NONE
    recurring_count: int = Field(default=0, ge=0)
    location: int | None = None
    notes: str | None = None


class BookingPublic(SQLModel):
    id: uuid.UUID
    customer_id: int
    provider_id: int
    service_id: int | None = None
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    status: BookingStatus
    recurring_type: RecurringType
    recurring_count: int
    recurring_parent_id: uuid.UUID | None = None
    location: int | None = None
    notes: str | None = None
    created_at: datetime
