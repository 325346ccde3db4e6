from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from app.models.availability import AvailabilityWindow

SLOT_FORMAT = "%H:%M"


@dataclass(frozen=True)
class SlotClassification:
    """Interval-aligned HH:MM slots for one provider and date."""

    all_slots: list[str] = field(default_factory=list)
    available_slots: list[str] = field(default_factory=list)
    booked_slots: list[str] = field(default_factory=list)

    @classmethod
    def from_datetimes(
        cls, in_hours: list[datetime], available: list[datetime], booked: list[datetime]
    ) -> "SlotClassification":
        return cls(
            all_slots=[format_slot(s) for s in in_hours],
            available_slots=[format_slot(s) for s in available],
            booked_slots=[format_slot(s) for s in booked],
        )


def format_slot(dt: datetime) -> str:
    return dt.strftime(SLOT_FORMAT)


def build_slot_grid(d: date, start_hour: int, end_hour: int, interval_minutes: int) -> list[datetime]:
    """Candidate slot starts for the given date.

    Whole hours from start_hour to end_hour inclusive, each stepped by
    interval_minutes below 60; the last hour contributes only end_hour:00.
    Returns [] for a non-positive interval.
    """
    if interval_minutes <= 0:
        return []
    minutes = list(range(0, 60, interval_minutes))
    slots: list[datetime] = []
    for hour in range(start_hour, end_hour + 1):
        for minute in minutes:
            if hour == end_hour and minute > 0:
                break
            slots.append(datetime(d.year, d.month, d.day, hour, minute))
    return slots


def resolve_day_windows(
    windows: list[AvailabilityWindow], d: date, location: int | None = None
) -> list[AvailabilityWindow]:
    """Windows that apply to the date, available ones only.

    Date-specific rows override the weekday schedule entirely, so a single
    date row with is_available=False closes the day.
    """
    if location is not None:
        windows = [w for w in windows if w.location == location]
    dated = [w for w in windows if w.date == d]
    if dated:
        chosen = dated
    else:
        weekday = d.weekday()
        chosen = [w for w in windows if w.date is None and w.day_of_week == weekday]
    return sorted((w for w in chosen if w.is_available), key=lambda w: w.start_time)


def window_span(window: AvailabilityWindow, d: date) -> tuple[datetime, datetime]:
    start = datetime.combine(d, window.start_time)
    end = datetime.combine(d, window.end_time)
    if window.wraps_midnight:
        end += timedelta(days=1)
    return start, end


def in_any_window(instant: datetime, spans: list[tuple[datetime, datetime]], closed: bool = True) -> bool:
    """True if instant lies in one of the spans.

    closed=True counts the closing instant, which is how the grid lists a
    09:00-17:00 window (17:00 included); booking steps use half-open spans.
    """
    if closed:
        return any(start <= instant <= end for start, end in spans)
    return any(start <= instant < end for start, end in spans)


def classify_in_hours(
    grid: list[datetime], windows: list[AvailabilityWindow], d: date
) -> list[datetime]:
    """Grid slots covered by at least one of the day's windows.

    A window's closing instant is listed too, although validate_candidate
    never accepts a booking starting there.
    """
    spans = [window_span(w, d) for w in windows]
    return [s for s in grid if in_any_window(s, spans)]


def parse_business_hours(value: str) -> tuple[int, int]:
    """'HH:MM-HH:MM' -> (start_hour, end_hour). Minutes are ignored."""
    start, end = value.split("-")
    start_hour = int(start.strip().split(":")[0])
    end_hour = int(end.strip().split(":")[0])
    if not (0 <= start_hour <= 23 and 0 <= end_hour <= 23) or start_hour > end_hour:
        raise ValueError(f"invalid business hours: {value!r}")
    return start_hour, end_hour


def merge_spans(spans: list[tuple[datetime, datetime]]) -> list[tuple[datetime, datetime]]:
    """Union of spans, with touching or overlapping spans joined."""
    merged: list[tuple[datetime, datetime]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged
