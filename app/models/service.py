from sqlmodel import Field, SQLModel


class Service(SQLModel, table=True):
    __tablename__ = "services"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    duration_minutes: int = 60


class ServiceProvider(SQLModel, table=True):
    """Provider assigned to a service. A service with no rows here is unassigned."""

    __tablename__ = "service_providers"
    service_id: int = Field(foreign_key="services.id", primary_key=True)
    provider_id: int = Field(primary_key=True, index=True)
