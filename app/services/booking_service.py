import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

from app.core.errors import (
    AdvanceWindowError,
    AvailabilityError,
    BookingNotFoundError,
    ConflictError,
    InvalidTransitionError,
    PastBookingError,
    ValidationError,
)
from app.models.booking import Booking, BookingCreate, BookingStatus, RecurringType, TERMINAL_STATUSES
from app.repositories.base import AvailabilityRepository, BookingRepository, ServiceRepository
from app.services.booking_policy import validate_booking_time
from app.services.conflict_service import ConflictScanner, intervals_overlap, occupying_bookings
from app.services.locks import ProviderLockRegistry
from app.services.recurrence_service import expand_recurring
from app.services.settings_service import SchedulingSettings, SettingsResolver
from app.services.slot_service import (
    SlotClassification,
    build_slot_grid,
    classify_in_hours,
    resolve_day_windows,
    window_span,
)

logger = logging.getLogger(__name__)

BEST_EFFORT = "best_effort"
STRICT = "strict"

# Forward-only lifecycle; completed and cancelled are terminal, blocked takes no transitions
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
}

CREATABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

_RECOVERABLE = (AvailabilityError, ConflictError, PastBookingError, AdvanceWindowError)


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass(frozen=True)
class SkippedOccurrence:
    start_time: datetime
    code: str
    message: str


@dataclass
class RecurringBookingSet:
    parent: Booking
    instances: list[Booking] = field(default_factory=list)
    skipped: list[SkippedOccurrence] = field(default_factory=list)

    @property
    def bookings(self) -> list[Booking]:
        return [self.parent, *self.instances]


@dataclass(frozen=True)
class DaySchedule:
    """Everything the conflict checks need for one provider and date."""

    day: date
    grid: list[datetime]
    in_hours: list[datetime]
    spans: list[tuple[datetime, datetime]]
    occupying: list[Booking]


class BookingScheduler:
    """Answers "which slots are free" and "can this booking be placed".

    All collaborators are injected; nothing is looked up globally. Writes for
    one provider happen inside that provider's critical section.
    """

    def __init__(
        self,
        settings_resolver: SettingsResolver,
        availability: AvailabilityRepository,
        bookings: BookingRepository,
        services: ServiceRepository,
        locks: ProviderLockRegistry | None = None,
        clock: Callable[[], datetime] = _utc_naive_now,
        recurrence_policy: str = BEST_EFFORT,
        skip_conflicts_for_unassigned_services: bool = True,
    ) -> None:
        if recurrence_policy not in (BEST_EFFORT, STRICT):
            raise ValueError(f"unknown recurrence policy: {recurrence_policy}")
        self.settings_resolver = settings_resolver
        self.availability = availability
        self.bookings = bookings
        self.services = services
        self.locks = locks or ProviderLockRegistry()
        self.clock = clock
        self.recurrence_policy = recurrence_policy
        self.skip_conflicts_for_unassigned_services = skip_conflicts_for_unassigned_services

    # Read path

    async def classify_slots(
        self,
        provider_id: int,
        day: date,
        location: int | None = None,
        service_id: int | None = None,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> SlotClassification:
        if provider_id is None or day is None:
            raise ValidationError("Provider and date are required")
        cfg = await self._scheduling_settings()
        try:
            schedule = await self._day_schedule(provider_id, day, location, cfg, exclude_booking_id)
        except AvailabilityError as e:
            # Callers rendering "date not available" still get an empty grid
            e.classification = SlotClassification()
            raise
        if service_id is not None and await self._skips_conflicts(service_id):
            return SlotClassification.from_datetimes(schedule.in_hours, schedule.in_hours, [])
        # Window closing instants stay listed here; placement rejects them as start times
        partition = ConflictScanner(cfg.interval_minutes).partition(schedule.in_hours, schedule.occupying)
        return SlotClassification.from_datetimes(schedule.in_hours, partition.available, partition.booked)

    async def get_booking(self, booking_id: uuid.UUID) -> Booking:
        booking = await self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking

    # Write path

    async def place_booking(self, request: BookingCreate) -> Booking | RecurringBookingSet:
        self._require_fields(request)
        if request.status not in CREATABLE_STATUSES:
            raise ValidationError(f"New bookings cannot start as {request.status.value}")
        service = await self.services.get(request.service_id)
        if service is None:
            raise ValidationError(f"Service {request.service_id} not found")
        duration = request.duration_minutes or service.duration_minutes
        if duration <= 0:
            raise ValidationError("Duration must be a positive number of minutes")

        cfg = await self._scheduling_settings()
        now = self.clock()
        validate_booking_time(request.start_time, now, cfg.max_advance_days)
        skip_conflicts = self.skip_conflicts_for_unassigned_services and service.is_unassigned

        parent = Booking(
            customer_id=request.customer_id,
            provider_id=request.provider_id,
            service_id=request.service_id,
            start_time=request.start_time,
            end_time=request.start_time + timedelta(minutes=duration),
            duration_minutes=duration,
            status=request.status,
            recurring_type=request.recurring_type,
            recurring_count=request.recurring_count,
            location=request.location,
            notes=request.notes,
        )
        follow_ups = expand_recurring(parent, request.recurring_type, request.recurring_count)
        scanner = ConflictScanner(cfg.interval_minutes)

        async with self.locks.hold(request.provider_id):
            schedule = await self._day_schedule(
                request.provider_id, request.start_time.date(), request.location, cfg
            )
            if not skip_conflicts:
                scanner.validate_candidate(
                    parent.start_time, duration, schedule.grid, schedule.spans, schedule.occupying
                )
            skipped: list[SkippedOccurrence] = []
            if follow_ups and self.recurrence_policy == STRICT:
                follow_ups, skipped = await self._vet_occurrences(
                    follow_ups, request.location, cfg, now, scanner, skip_conflicts
                )
            await self.bookings.insert_many([parent, *follow_ups])

        logger.info(
            "Booking %s placed for provider %s at %s (%d min, %d follow-up(s), %d skipped)",
            parent.id, parent.provider_id, parent.start_time, duration, len(follow_ups), len(skipped),
        )
        if request.recurring_type != RecurringType.NONE and request.recurring_count >= 2:
            return RecurringBookingSet(parent=parent, instances=follow_ups, skipped=skipped)
        return parent

    async def reschedule(
        self, booking_id: uuid.UUID, new_start: datetime, new_duration: int | None = None
    ) -> Booking:
        if new_start is None:
            raise ValidationError("A new start time is required")
        booking = await self.get_booking(booking_id)
        if booking.status in TERMINAL_STATUSES:
            raise ValidationError(f"A {booking.status.value} booking cannot be rescheduled")
        duration = new_duration or booking.duration_minutes
        if duration <= 0:
            raise ValidationError("Duration must be a positive number of minutes")

        cfg = await self._scheduling_settings()
        validate_booking_time(new_start, self.clock(), cfg.max_advance_days)
        skip_conflicts = booking.service_id is not None and await self._skips_conflicts(booking.service_id)

        async with self.locks.hold(booking.provider_id):
            schedule = await self._day_schedule(
                booking.provider_id, new_start.date(), booking.location, cfg, exclude_booking_id=booking.id
            )
            if not skip_conflicts:
                ConflictScanner(cfg.interval_minutes).validate_candidate(
                    new_start, duration, schedule.grid, schedule.spans, schedule.occupying
                )
            booking.move_to(new_start, duration)
            await self.bookings.update(booking)
        logger.info("Booking %s moved to %s (%d min)", booking.id, new_start, duration)
        return booking

    async def update_status(self, booking_id: uuid.UUID, status: BookingStatus) -> Booking:
        booking = await self.get_booking(booking_id)
        if booking.status == status:
            return booking
        if status not in ALLOWED_TRANSITIONS.get(booking.status, frozenset()):
            raise InvalidTransitionError(
                f"Cannot change booking status from {booking.status.value} to {status.value}"
            )
        booking.status = status
        await self.bookings.update(booking)
        logger.info("Booking %s is now %s", booking.id, status.value)
        return booking

    async def block_time(
        self,
        provider_id: int,
        start: datetime,
        end: datetime,
        notes: str | None = None,
        location: int | None = None,
    ) -> Booking:
        """Reserve provider time without a customer; it blocks like a booking."""
        if provider_id is None or start is None or end is None:
            raise ValidationError("Provider, start and end are required")
        if end <= start:
            raise ValidationError("End time must be after start time")
        block = Booking(
            customer_id=provider_id,
            provider_id=provider_id,
            service_id=None,
            start_time=start,
            end_time=end,
            duration_minutes=int((end - start).total_seconds() // 60),
            status=BookingStatus.BLOCKED,
            location=location,
            notes=notes or "Blocked time slot",
        )
        async with self.locks.hold(provider_id):
            for b in await self._occupying_between(provider_id, start, end):
                if intervals_overlap(start, end, b.start_time, b.end_time):
                    raise ConflictError(
                        f"Cannot block {start:%Y-%m-%d %H:%M} - {end:%H:%M}: "
                        f"it overlaps a {b.status.value} booking at {b.start_time:%Y-%m-%d %H:%M}.",
                        reason=ConflictError.OVERLAP,
                    )
            await self.bookings.insert(block)
        logger.info("Provider %s blocked %s - %s", provider_id, start, end)
        return block

    async def unblock_time(self, block_id: uuid.UUID, provider_id: int | None = None) -> None:
        """Delete a blocked-time row; other bookings are left alone."""
        block = await self.get_booking(block_id)
        if provider_id is not None and block.provider_id != provider_id:
            raise BookingNotFoundError(f"Blocked time {block_id} not found for provider {provider_id}")
        if block.status != BookingStatus.BLOCKED:
            raise ValidationError(f"Booking {block_id} is not blocked time")
        async with self.locks.hold(block.provider_id):
            await self.bookings.delete(block)
        logger.info("Provider %s unblocked %s - %s", block.provider_id, block.start_time, block.end_time)

    async def blocked_slots(self, provider_id: int, day: date) -> list[Booking]:
        if provider_id is None or day is None:
            raise ValidationError("Provider and date are required")
        return await self.bookings.blocked_for(provider_id, day)

    # Helpers

    @staticmethod
    def _require_fields(request: BookingCreate) -> None:
        missing = [
            name
            for name in ("customer_id", "provider_id", "service_id", "start_time")
            if getattr(request, name, None) is None
        ]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
        if request.duration_minutes is not None and request.duration_minutes <= 0:
            raise ValidationError("Duration must be a positive number of minutes")

    async def _scheduling_settings(self) -> SchedulingSettings:
        cfg = await self.settings_resolver.resolve()
        if cfg.interval_minutes <= 0:
            raise ValidationError(f"Slot interval must be positive, got {cfg.interval_minutes}")
        return cfg

    async def _skips_conflicts(self, service_id: int) -> bool:
        if not self.skip_conflicts_for_unassigned_services:
            return False
        service = await self.services.get(service_id)
        return service is not None and service.is_unassigned

    async def _day_schedule(
        self,
        provider_id: int,
        day: date,
        location: int | None,
        cfg: SchedulingSettings,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> DaySchedule:
        windows = resolve_day_windows(await self.availability.windows_for(provider_id, day), day, location)
        if not windows:
            raise AvailabilityError("The selected date is not available for the provider.")
        grid = build_slot_grid(day, cfg.start_hour, cfg.end_hour, cfg.interval_minutes)
        existing = await self.bookings.active_bookings_for(provider_id, day)
        double_bookable: set[int] = set()
        if self.skip_conflicts_for_unassigned_services:
            double_bookable = await self.services.unassigned_ids(
                {b.service_id for b in existing if b.service_id is not None}
            )
        return DaySchedule(
            day=day,
            grid=grid,
            in_hours=classify_in_hours(grid, windows, day),
            spans=[window_span(w, day) for w in windows],
            occupying=occupying_bookings(existing, exclude_booking_id, double_bookable),
        )

    async def _occupying_between(self, provider_id: int, start: datetime, end: datetime) -> list[Booking]:
        seen: dict[uuid.UUID, Booking] = {}
        day = start.date()
        while day <= end.date():
            for b in await self.bookings.active_bookings_for(provider_id, day):
                seen[b.id] = b
            day += timedelta(days=1)
        double_bookable: set[int] = set()
        if self.skip_conflicts_for_unassigned_services:
            double_bookable = await self.services.unassigned_ids(
                {b.service_id for b in seen.values() if b.service_id is not None}
            )
        return occupying_bookings(list(seen.values()), double_bookable_service_ids=double_bookable)

    async def _vet_occurrences(
        self,
        occurrences: list[Booking],
        location: int | None,
        cfg: SchedulingSettings,
        now: datetime,
        scanner: ConflictScanner,
        skip_conflicts: bool,
    ) -> tuple[list[Booking], list[SkippedOccurrence]]:
        accepted: list[Booking] = []
        skipped: list[SkippedOccurrence] = []
        for occurrence in occurrences:
            try:
                validate_booking_time(occurrence.start_time, now, cfg.max_advance_days)
                schedule = await self._day_schedule(
                    occurrence.provider_id, occurrence.start_time.date(), location, cfg
                )
                if not skip_conflicts:
                    scanner.validate_candidate(
                        occurrence.start_time,
                        occurrence.duration_minutes,
                        schedule.grid,
                        schedule.spans,
                        schedule.occupying,
                    )
            except _RECOVERABLE as e:
                logger.warning("Skipping recurring occurrence at %s: %s", occurrence.start_time, e.message)
                skipped.append(SkippedOccurrence(occurrence.start_time, e.code, e.message))
                continue
            accepted.append(occurrence)
        return accepted, skipped
