import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from app.core.errors import ConflictError
from app.models.booking import Booking
from app.services.slot_service import format_slot, in_any_window, merge_spans

logger = logging.getLogger(__name__)


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and a_end > b_start


def occupying_bookings(
    bookings: list[Booking],
    exclude_booking_id=None,
    double_bookable_service_ids: set[int] | frozenset[int] = frozenset(),
) -> list[Booking]:
    """Bookings that hold provider time.

    Drops cancelled rows, the booking being edited, and bookings of services
    that allow double-booking.
    """
    return [
        b
        for b in bookings
        if b.is_active
        and (exclude_booking_id is None or b.id != exclude_booking_id)
        and (b.service_id is None or b.service_id not in double_bookable_service_ids)
    ]


def _conflict_message(b: Booking) -> str:
    return (
        f"The booking duration would conflict with an existing booking at {b.start_time:%Y-%m-%d %H:%M}. "
        "Please select a different time or reduce the duration."
    )


def _beyond_hours_message(duration_minutes: int) -> str:
    return (
        f"The booking duration ({duration_minutes} minutes) would extend beyond working hours. "
        "Please select an earlier time or reduce the duration."
    )


@dataclass(frozen=True)
class SlotPartition:
    available: list[datetime]
    booked: list[datetime]


class ConflictScanner:
    """Splits the in-hours grid by existing bookings and vets candidate spans.

    Everything steps through time in interval_minutes increments.
    """

    def __init__(self, interval_minutes: int) -> None:
        self.interval = timedelta(minutes=interval_minutes)

    @staticmethod
    def booking_at(instant: datetime, occupying: list[Booking]) -> Booking | None:
        for b in occupying:
            if b.start_time <= instant < b.end_time:
                return b
        return None

    def partition(self, in_hours: list[datetime], occupying: list[Booking]) -> SlotPartition:
        available: list[datetime] = []
        booked: list[datetime] = []
        for slot in in_hours:
            if self.booking_at(slot, occupying) is not None:
                booked.append(slot)
            else:
                available.append(slot)
        return SlotPartition(available=available, booked=booked)

    def steps(self, start: datetime, duration_minutes: int) -> list[datetime]:
        """Interval-sized steps from start, followed by the end instant."""
        end = start + timedelta(minutes=duration_minutes)
        out: list[datetime] = []
        current = start
        while current < end:
            out.append(current)
            current += self.interval
        out.append(end)
        return out

    def validate_candidate(
        self,
        start: datetime,
        duration_minutes: int,
        grid: list[datetime],
        spans: list[tuple[datetime, datetime]],
        occupying: list[Booking],
    ) -> None:
        """Raise ConflictError if the span touches a booking or leaves working hours.

        Every occupied step must sit on the grid (by time of day) and inside
        a window, the window end excluded; the end instant only has to reach
        the window end. Steps are checked by time of day so a span crossing
        midnight inside a wrapping window is still recognised. Finally the
        whole span has to fit inside the merged windows, so windows whose
        edges fall between grid steps cannot be bridged.
        """
        end = start + timedelta(minutes=duration_minutes)
        grid_times = {s.time() for s in grid}
        for step in self.steps(start, duration_minutes):
            if step < end:
                hit = self.booking_at(step, occupying)
                if hit is not None:
                    raise ConflictError(_conflict_message(hit), reason=ConflictError.OVERLAP)
                covered = step.time() in grid_times and in_any_window(step, spans, closed=False)
            else:
                covered = in_any_window(step, spans)
            if covered:
                continue
            if step == start:
                message = f"The selected time {format_slot(start)} is not available. Please select from the available time slots."
            else:
                message = _beyond_hours_message(duration_minutes)
            raise ConflictError(message, reason=ConflictError.OUTSIDE_HOURS)
        # The whole span must sit inside one stretch of contiguous availability
        if not any(s <= start and end <= e for s, e in merge_spans(spans)):
            raise ConflictError(_beyond_hours_message(duration_minutes), reason=ConflictError.OUTSIDE_HOURS)
        # Catches bookings that are not aligned to the current interval
        for b in occupying:
            if intervals_overlap(start, end, b.start_time, b.end_time):
                raise ConflictError(_conflict_message(b), reason=ConflictError.OVERLAP)
        logger.debug("Candidate %s (+%d min) clear of %d booking(s)", start, duration_minutes, len(occupying))
