from datetime import timedelta

import pytest

from app.models.booking import BookingStatus, RecurringType
from app.services.recurrence_service import expand_recurring
from tests.factories import MONDAY, at, booking


def _parent(kind=RecurringType.WEEKLY, count=4):
    return booking(3, at(MONDAY, "10:00"), 45, recurring_type=kind, recurring_count=count,
                   status=BookingStatus.CONFIRMED, location=2, notes="physio")


@pytest.mark.parametrize("kind,step", [(RecurringType.DAILY, 1), (RecurringType.WEEKLY, 7)])
def test_follow_ups_are_offset_by_whole_steps(kind, step):
    parent = _parent(kind, 4)
    follow_ups = expand_recurring(parent, kind, 4)
    assert [b.start_time for b in follow_ups] == [
        parent.start_time + timedelta(days=step * i) for i in (1, 2, 3)
    ]


def test_follow_ups_copy_the_parent():
    parent = _parent()
    for b in expand_recurring(parent, RecurringType.WEEKLY, 4):
        assert b.recurring_parent_id == parent.id
        assert b.id != parent.id
        assert b.end_time - b.start_time == timedelta(minutes=45)
        assert (b.customer_id, b.provider_id, b.service_id) == (parent.customer_id, parent.provider_id, 3)
        assert b.status == BookingStatus.CONFIRMED
        assert b.location == 2 and b.notes == "physio"


@pytest.mark.parametrize("kind,count", [
    (RecurringType.WEEKLY, 1),
    (RecurringType.WEEKLY, 0),
    (RecurringType.NONE, 5),
])
def test_nothing_to_expand(kind, count):
    assert expand_recurring(_parent(kind, count), kind, count) == []
