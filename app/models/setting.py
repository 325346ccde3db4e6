from datetime import UTC, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Setting(SQLModel, table=True):
    __tablename__ = "settings"
    __table_args__ = (UniqueConstraint("category", "key", name="uq_settings_category_key"),)
    id: int | None = Field(default=None, primary_key=True)
    category: str = Field(index=True)
    key: str = Field(index=True)
    value: str | None = None
    updated_at: datetime = Field(default_factory=_utc_naive_now)
