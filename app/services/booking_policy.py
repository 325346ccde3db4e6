from datetime import datetime

from app.core.errors import AdvanceWindowError, PastBookingError

DEFAULT_MAX_ADVANCE_DAYS = 30


def validate_booking_time(
    start_time: datetime, now: datetime, max_advance_days: int | None = DEFAULT_MAX_ADVANCE_DAYS
) -> None:
    """Booking-window policy, checked at calendar-day granularity.

    Any time on a past day is rejected; a start exactly max_advance_days
    ahead is still accepted.
    """
    if max_advance_days is None:
        max_advance_days = DEFAULT_MAX_ADVANCE_DAYS
    days_ahead = (start_time.date() - now.date()).days
    if days_ahead < 0:
        raise PastBookingError("Cannot book appointments in the past")
    if days_ahead > max_advance_days:
        raise AdvanceWindowError(
            f"Cannot book appointments more than {max_advance_days} days in advance",
            max_advance_days=max_advance_days,
        )
