from datetime import date

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError
from app.models.availability import AvailabilityWindow


class SqlAvailabilityRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def windows_for(self, provider_id: int, d: date) -> list[AvailabilityWindow]:
        try:
            result = await self.session.execute(
                select(AvailabilityWindow)
                .where(
                    AvailabilityWindow.provider_id == provider_id,
                    or_(
                        AvailabilityWindow.date == d,
                        and_(
                            AvailabilityWindow.date.is_(None),
                            AvailabilityWindow.day_of_week == d.weekday(),
                        ),
                    ),
                )
                .order_by(AvailabilityWindow.start_time)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load availability: {e}") from e
        return list(result.scalars().all())
