from app.models.service import Service, ServiceProvider
from app.models.availability import AvailabilityWindow
from app.models.booking import (
    Booking,
    BookingCreate,
    BookingPublic,
    BookingStatus,
    RecurringType,
)
from app.models.setting import Setting

__all__ = [
    "Service",
    "ServiceProvider",
    "AvailabilityWindow",
    "Booking",
    "BookingCreate",
    "BookingPublic",
    "BookingStatus",
    "RecurringType",
    "Setting",
]
