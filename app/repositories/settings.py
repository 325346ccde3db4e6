from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError
from app.models.setting import Setting


class SqlSettingsSource:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_value(self, category: str, key: str) -> str | None:
        try:
            result = await self.session.execute(
                select(Setting.value).where(Setting.category == category, Setting.key == key)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load setting {category}.{key}: {e}") from e
        return result.scalar_one_or_none()
