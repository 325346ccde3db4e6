from datetime import datetime

from app.services.slot_service import (
    build_slot_grid,
    classify_in_hours,
    format_slot,
    resolve_day_windows,
    window_span,
)
from tests.factories import MONDAY, window

TUESDAY = MONDAY.replace(day=MONDAY.day + 1)


def _in_hours(windows, d=MONDAY, start_hour=9, end_hour=17, interval=30):
    grid = build_slot_grid(d, start_hour, end_hour, interval)
    return [format_slot(s) for s in classify_in_hours(grid, resolve_day_windows(windows, d), d)]


def test_weekday_window_applies_on_matching_weekday_only():
    rows = [window("09:00", "17:00", day_of_week=0)]
    assert len(resolve_day_windows(rows, MONDAY)) == 1
    assert resolve_day_windows(rows, TUESDAY) == []


def test_date_specific_rows_override_weekday_schedule():
    rows = [
        window("09:00", "17:00", day_of_week=0),
        window("13:00", "15:00", on=MONDAY),
    ]
    resolved = resolve_day_windows(rows, MONDAY)
    assert [w.date for w in resolved] == [MONDAY]
    assert _in_hours(rows) == ["13:00", "13:30", "14:00", "14:30", "15:00"]


def test_unavailable_date_row_closes_the_day():
    rows = [
        window("09:00", "17:00", day_of_week=0),
        window("09:00", "17:00", on=MONDAY, is_available=False),
    ]
    assert resolve_day_windows(rows, MONDAY) == []


def test_unavailable_weekday_rows_are_dropped():
    rows = [
        window("09:00", "12:00", day_of_week=0),
        window("13:00", "17:00", day_of_week=0, is_available=False),
    ]
    assert _in_hours(rows)[-1] == "12:00"


def test_location_filter_is_exact():
    rows = [
        window("09:00", "12:00", day_of_week=0, location=1),
        window("13:00", "17:00", day_of_week=0, location=2),
        window("18:00", "19:00", day_of_week=0),
    ]
    resolved = resolve_day_windows(rows, MONDAY, location=2)
    assert [w.location for w in resolved] == [2]
    assert len(resolve_day_windows(rows, MONDAY)) == 3


def test_windows_come_back_sorted_by_start():
    rows = [window("13:00", "17:00", day_of_week=0), window("09:00", "12:00", day_of_week=0)]
    assert [w.start_time.hour for w in resolve_day_windows(rows, MONDAY)] == [9, 13]


def test_closing_instant_is_listed():
    slots = _in_hours([window("09:00", "17:00", day_of_week=0)])
    assert slots[0] == "09:00"
    assert slots[-1] == "17:00"
    assert len(slots) == 17


def test_split_windows_are_unioned():
    rows = [window("09:00", "11:00", day_of_week=0), window("14:00", "15:00", day_of_week=0)]
    assert _in_hours(rows) == ["09:00", "09:30", "10:00", "10:30", "11:00", "14:00", "14:30", "15:00"]


def test_window_past_midnight_ends_next_day():
    late = window("22:00", "02:00", day_of_week=0)
    assert late.wraps_midnight
    start, end = window_span(late, MONDAY)
    assert start == datetime(2026, 10, 26, 22, 0)
    assert end == datetime(2026, 10, 27, 2, 0)
    assert _in_hours([late], start_hour=0, end_hour=23, interval=60) == ["22:00", "23:00"]
