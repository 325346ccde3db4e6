import datetime as dt

from sqlmodel import Field, SQLModel


class AvailabilityWindow(SQLModel, table=True):
    """Provider working window, either for one date or recurring on a weekday.

    ``date`` is None for weekday-recurring rows, which then use ``day_of_week``
    (0 = Monday, as ``date.weekday()``). An ``end_time`` earlier than
    ``start_time`` means the window runs past midnight.
    """

    __tablename__ = "availability_windows"
    id: int | None = Field(default=None, primary_key=True)
    provider_id: int = Field(index=True)
    date: dt.date | None = Field(default=None, index=True)
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: dt.time
    end_time: dt.time
    is_available: bool = True
    location: int | None = Field(default=None, index=True)

    @property
    def is_recurring(self) -> bool:
        return self.date is None

    @property
    def wraps_midnight(self) -> bool:
        return self.end_time < self.start_time
