import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_scheduler, to_naive_utc
from app.api.schemas.booking import BlockTimeRequest, SlotClassificationResponse
from app.models.booking import BookingPublic
from app.services.booking_service import BookingScheduler

router = APIRouter(prefix="/providers", tags=["slots"])


@router.get("/{provider_id}/slots", response_model=SlotClassificationResponse)
async def provider_slots(
    provider_id: int,
    date_param: date = Query(..., alias="date"),
    location: int | None = Query(None),
    service_id: int | None = Query(None),
    exclude_booking_id: uuid.UUID | None = Query(None),
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> SlotClassificationResponse:
    """Slots for one provider and date: in-hours, free, and taken by bookings."""
    classification = await scheduler.classify_slots(
        provider_id,
        date_param,
        location=location,
        service_id=service_id,
        exclude_booking_id=exclude_booking_id,
    )
    return SlotClassificationResponse(
        date=date_param.isoformat(),
        all_slots=classification.all_slots,
        available_slots=classification.available_slots,
        booked_slots=classification.booked_slots,
    )


@router.post("/{provider_id}/blocks", response_model=BookingPublic, status_code=status.HTTP_201_CREATED)
async def block_provider_time(
    provider_id: int,
    body: BlockTimeRequest,
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> BookingPublic:
    block = await scheduler.block_time(
        provider_id,
        to_naive_utc(body.start_time),
        to_naive_utc(body.end_time),
        notes=body.notes,
        location=body.location,
    )
    return BookingPublic.model_validate(block)


@router.get("/{provider_id}/blocks", response_model=list[BookingPublic])
async def list_provider_blocks(
    provider_id: int,
    date_param: date = Query(..., alias="date"),
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> list[BookingPublic]:
    blocks = await scheduler.blocked_slots(provider_id, date_param)
    return [BookingPublic.model_validate(b) for b in blocks]


@router.delete("/{provider_id}/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unblock_provider_time(
    provider_id: int,
    block_id: uuid.UUID,
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> None:
    await scheduler.unblock_time(block_id, provider_id=provider_id)
