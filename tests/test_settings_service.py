from app.repositories.settings import SqlSettingsSource
from app.services.settings_service import SchedulingSettings, SettingsResolver
from tests.factories import add_setting, make_settings


async def test_defaults_when_table_is_empty(session):
    resolved = await SettingsResolver(SqlSettingsSource(session), make_settings()).resolve()
    assert resolved == SchedulingSettings(interval_minutes=30, start_hour=9, end_hour=17, max_advance_days=30)


async def test_stored_values_win(session):
    await add_setting(session, "booking", "bookingTimeSlotInterval", "15")
    await add_setting(session, "system", "businessHours", "08:00-18:00")
    await add_setting(session, "booking", "advanceBookingDays", "60")
    resolved = await SettingsResolver(SqlSettingsSource(session), make_settings()).resolve()
    assert resolved == SchedulingSettings(interval_minutes=15, start_hour=8, end_hour=18, max_advance_days=60)


async def test_malformed_values_fall_back(session, caplog):
    await add_setting(session, "booking", "bookingTimeSlotInterval", "half an hour")
    await add_setting(session, "system", "businessHours", "late")
    config = make_settings(default_slot_interval_minutes=20, default_business_hours="10:00-14:00")
    resolved = await SettingsResolver(SqlSettingsSource(session), config).resolve()
    assert (resolved.interval_minutes, resolved.start_hour, resolved.end_hour) == (20, 10, 14)
    assert "not an integer" in caplog.text


async def test_blank_value_uses_default(session):
    await add_setting(session, "booking", "advanceBookingDays", "  ")
    resolved = await SettingsResolver(SqlSettingsSource(session), make_settings()).resolve()
    assert resolved.max_advance_days == 30
