import logging
import uuid
from datetime import date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError
from app.models.booking import Booking, BookingStatus

logger = logging.getLogger(__name__)


class SqlBookingRepository:
    """Booking storage on an AsyncSession.

    Writes commit immediately: the scheduler calls them inside the provider
    critical section, and the row must be visible before the lock is released.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def active_bookings_for(self, provider_id: int, d: date) -> list[Booking]:
        # Anything overlapping d or the following day, so spans crossing midnight are seen
        day_start = datetime(d.year, d.month, d.day)
        range_end = day_start + timedelta(days=2)
        try:
            result = await self.session.execute(
                select(Booking)
                .where(
                    Booking.provider_id == provider_id,
                    Booking.status != BookingStatus.CANCELLED,
                    Booking.start_time < range_end,
                    Booking.end_time > day_start,
                )
                .order_by(Booking.start_time)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load bookings: {e}") from e
        return list(result.scalars().all())

    async def get(self, booking_id: uuid.UUID) -> Booking | None:
        try:
            return await self.session.get(Booking, booking_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load booking: {e}") from e

    async def insert(self, booking: Booking) -> Booking:
        (saved,) = await self.insert_many([booking])
        return saved

    async def insert_many(self, bookings: list[Booking]) -> list[Booking]:
        self.session.add_all(bookings)
        await self._commit("insert %d booking(s)" % len(bookings))
        return bookings

    async def update(self, booking: Booking) -> Booking:
        self.session.add(booking)
        await self._commit("update booking %s" % booking.id)
        return booking

    async def delete(self, booking: Booking) -> None:
        await self.session.delete(booking)
        await self._commit("delete booking %s" % booking.id)

    async def blocked_for(self, provider_id: int, d: date) -> list[Booking]:
        day_start = datetime(d.year, d.month, d.day)
        try:
            result = await self.session.execute(
                select(Booking)
                .where(
                    Booking.provider_id == provider_id,
                    Booking.status == BookingStatus.BLOCKED,
                    Booking.start_time >= day_start,
                    Booking.start_time < day_start + timedelta(days=1),
                )
                .order_by(Booking.start_time)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load blocked time: {e}") from e
        return list(result.scalars().all())

    async def _commit(self, what: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to %s: %s", what, e)
            raise PersistenceError("Booking could not be saved. Please try again.") from e
