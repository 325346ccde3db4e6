"""Typed failures raised by the scheduling core.

Every policy failure is raised before any write so callers can show the
matching corrective message. ``code`` is stable and safe to return to clients.
"""


class SchedulingError(Exception):
    code = "scheduling_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Malformed input: missing provider/date/duration, non-positive interval."""

    code = "invalid_request"


class BookingNotFoundError(ValidationError):
    code = "booking_not_found"


class InvalidTransitionError(ValidationError):
    code = "invalid_status_transition"


class AvailabilityError(SchedulingError):
    """No availability window exists for the requested date."""

    code = "date_unavailable"
    classification = None  # set to an empty SlotClassification on the read path


class ConflictError(SchedulingError):
    """Candidate overlaps a booking or runs past the end of a window."""

    code = "time_conflict"

    OVERLAP = "overlap"
    OUTSIDE_HOURS = "outside_hours"

    def __init__(self, message: str, reason: str = OVERLAP) -> None:
        super().__init__(message)
        self.reason = reason


class PastBookingError(SchedulingError):
    code = "booking_in_past"


class AdvanceWindowError(SchedulingError):
    code = "beyond_advance_window"

    def __init__(self, message: str, max_advance_days: int) -> None:
        super().__init__(message)
        self.max_advance_days = max_advance_days


class PersistenceError(SchedulingError):
    code = "save_failed"
