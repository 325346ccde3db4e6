import uuid

from fastapi import APIRouter, Depends, status

from app.api.deps import get_scheduler, to_naive_utc
from app.api.schemas.booking import (
    RecurringBookingSetResponse,
    RescheduleRequest,
    SkippedOccurrenceOut,
    StatusUpdateRequest,
)
from app.models.booking import Booking, BookingCreate, BookingPublic
from app.services.booking_service import BookingScheduler, RecurringBookingSet

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _to_public(b: Booking) -> BookingPublic:
    return BookingPublic.model_validate(b)


def _set_to_public(result: RecurringBookingSet) -> RecurringBookingSetResponse:
    return RecurringBookingSetResponse(
        parent=_to_public(result.parent),
        instances=[_to_public(b) for b in result.instances],
        skipped=[
            SkippedOccurrenceOut(start_time=s.start_time, code=s.code, message=s.message)
            for s in result.skipped
        ],
    )


@router.post(
    "",
    response_model=BookingPublic | RecurringBookingSetResponse,
    status_code=status.HTTP_201_CREATED,
)
async def place_booking(
    body: BookingCreate,
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> BookingPublic | RecurringBookingSetResponse:
    """Validate and create a booking; recurring requests return the whole set."""
    body.start_time = to_naive_utc(body.start_time)
    result = await scheduler.place_booking(body)
    if isinstance(result, RecurringBookingSet):
        return _set_to_public(result)
    return _to_public(result)


@router.get("/{booking_id}", response_model=BookingPublic)
async def get_booking(
    booking_id: uuid.UUID,
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> BookingPublic:
    return _to_public(await scheduler.get_booking(booking_id))


@router.patch("/{booking_id}/reschedule", response_model=BookingPublic)
async def reschedule_booking(
    booking_id: uuid.UUID,
    body: RescheduleRequest,
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> BookingPublic:
    booking = await scheduler.reschedule(
        booking_id, to_naive_utc(body.start_time), body.duration_minutes
    )
    return _to_public(booking)


@router.patch("/{booking_id}/status", response_model=BookingPublic)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: StatusUpdateRequest,
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> BookingPublic:
    booking = await scheduler.update_status(booking_id, body.status)
    return _to_public(booking)
