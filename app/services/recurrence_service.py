from datetime import timedelta

from app.models.booking import Booking, RecurringType

_STEP_DAYS = {
    RecurringType.DAILY: 1,
    RecurringType.WEEKLY: 7,
}


def expand_recurring(parent: Booking, recurring_type: RecurringType, recurring_count: int) -> list[Booking]:
    """Follow-up occurrences for a recurring booking, parent excluded.

    recurring_count is the total number of occurrences including the parent,
    so a count below 2 (or type none) yields nothing. Each follow-up keeps
    the parent's duration and references it through recurring_parent_id.
    """
    step_days = _STEP_DAYS.get(recurring_type)
    if step_days is None or recurring_count < 2:
        return []
    instances: list[Booking] = []
    for i in range(1, recurring_count):
        offset = timedelta(days=i * step_days)
        instances.append(
            Booking(
                customer_id=parent.customer_id,
                provider_id=parent.provider_id,
                service_id=parent.service_id,
                start_time=parent.start_time + offset,
                end_time=parent.end_time + offset,
                duration_minutes=parent.duration_minutes,
                status=parent.status,
                recurring_type=recurring_type,
                recurring_count=recurring_count,
                recurring_parent_id=parent.id,
                location=parent.location,
                notes=parent.notes,
            )
        )
    return instances
