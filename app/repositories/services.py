from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError
from app.models.service import Service, ServiceProvider
from app.repositories.base import ServiceInfo


class SqlServiceRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, service_id: int) -> ServiceInfo | None:
        try:
            service = await self.session.get(Service, service_id)
            if service is None:
                return None
            result = await self.session.execute(
                select(ServiceProvider.provider_id).where(ServiceProvider.service_id == service_id)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load service: {e}") from e
        return ServiceInfo(
            id=service.id,
            duration_minutes=service.duration_minutes,
            assigned_provider_ids=frozenset(result.scalars().all()),
        )

    async def unassigned_ids(self, service_ids: set[int]) -> set[int]:
        if not service_ids:
            return set()
        try:
            result = await self.session.execute(
                select(ServiceProvider.service_id)
                .where(ServiceProvider.service_id.in_(service_ids))
                .distinct()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load service assignments: {e}") from e
        return set(service_ids) - set(result.scalars().all())
