from datetime import datetime
from pydantic import BaseModel, Field

from app.models.booking import BookingPublic, BookingStatus


class SlotClassificationResponse(BaseModel):
    date: str  # YYYY-MM-DD
    all_slots: list[str]
    available_slots: list[str]
    booked_slots: list[str]


class SkippedOccurrenceOut(BaseModel):
    start_time: datetime
    code: str
    message: str


class RecurringBookingSetResponse(BaseModel):
    parent: BookingPublic
    instances: list[BookingPublic]
    skipped: list[SkippedOccurrenceOut] = []


class RescheduleRequest(BaseModel):
    start_time: datetime
    duration_minutes: int | None = Field(default=None, gt=0)


class StatusUpdateRequest(BaseModel):
    status: BookingStatus


class BlockTimeRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    notes: str | None = None
    location: int | None = None
