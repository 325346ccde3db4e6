from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from the project root so it loads regardless of cwd
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./bookings.db"
    create_tables_on_startup: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Fallbacks used when the settings table has no value for a key
    default_slot_interval_minutes: int = 30
    default_business_hours: str = "09:00-17:00"
    default_advance_booking_days: int = 30

    # Scheduling policy switches
    # best_effort: only the first occurrence of a recurring booking is validated
    # strict: every occurrence is validated, failing ones are skipped and reported
    recurrence_policy: Literal["best_effort", "strict"] = "best_effort"
    # Bookings for a service with no assigned provider bypass conflict checks
    skip_conflicts_for_unassigned_services: bool = True

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
