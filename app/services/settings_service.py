import logging
from dataclasses import dataclass

from app.core.config import Settings, settings as app_settings
from app.repositories.base import SettingsSource
from app.services.slot_service import parse_business_hours

logger = logging.getLogger(__name__)

SLOT_INTERVAL_KEY = ("booking", "bookingTimeSlotInterval")
BUSINESS_HOURS_KEY = ("system", "businessHours")
ADVANCE_DAYS_KEY = ("booking", "advanceBookingDays")


@dataclass(frozen=True)
class SchedulingSettings:
    interval_minutes: int
    start_hour: int
    end_hour: int
    max_advance_days: int


class SettingsResolver:
    """Reads the three scheduling settings, falling back to configured defaults."""

    def __init__(self, source: SettingsSource, defaults: Settings | None = None) -> None:
        self.source = source
        self.defaults = defaults or app_settings

    async def resolve(self) -> SchedulingSettings:
        interval = await self._int_setting(SLOT_INTERVAL_KEY, self.defaults.default_slot_interval_minutes)
        advance = await self._int_setting(ADVANCE_DAYS_KEY, self.defaults.default_advance_booking_days)
        start_hour, end_hour = await self._business_hours()
        return SchedulingSettings(
            interval_minutes=interval,
            start_hour=start_hour,
            end_hour=end_hour,
            max_advance_days=advance,
        )

    async def _int_setting(self, key: tuple[str, str], default: int) -> int:
        raw = await self.source.get_value(*key)
        if raw is None or str(raw).strip() == "":
            return default
        try:
            return int(str(raw).strip())
        except ValueError:
            logger.warning("Setting %s.%s=%r is not an integer, using %d", key[0], key[1], raw, default)
            return default

    async def _business_hours(self) -> tuple[int, int]:
        raw = await self.source.get_value(*BUSINESS_HOURS_KEY)
        if raw:
            try:
                return parse_business_hours(raw)
            except ValueError:
                logger.warning("Setting system.businessHours=%r is malformed, using %s", raw, self.defaults.default_business_hours)
        return parse_business_hours(self.defaults.default_business_hours)
