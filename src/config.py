"""
config.py

Runtime settings for the Site Schedule API, read from the environment
(or a local ``.env`` file) by pydantic-settings.

Complex values are given as JSON, e.g.::

    HOLIDAYS='["2025-12-25", "2026-01-01"]'
    WEEKEND_DAYS='[6]'
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any, List, Literal, Optional

from pydantic import BeforeValidator, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from service import WorkingCalendar


# Company calendar observed by the field crews.  "DDO" = designated day off.
DEFAULT_HOLIDAYS: List[str] = [
    "2024-11-11",  # Veterans Day
    "2024-11-28",  # Thanksgiving
    "2024-11-29",  # Day after Thanksgiving
    "2024-12-23",  # DDO
    "2024-12-24",  # Christmas Eve
    "2024-12-25",  # Christmas
    "2025-01-01",  # New Year
    "2025-01-20",  # MLK Day
    "2025-02-10",  # DDO
    "2025-02-17",  # Presidents Day
    "2025-04-18",  # DDO
    "2025-05-23",  # DDO
    "2025-05-26",  # Memorial Day
    "2025-07-04",  # Independence Day
    "2025-07-07",  # DDO
    "2025-08-29",  # DDO
    "2025-09-01",  # Labor Day
    "2025-11-11",  # Veterans Day
    "2025-11-27",  # Thanksgiving
    "2025-11-28",  # Day after Thanksgiving
    "2025-12-25",  # Christmas
    "2025-12-26",  # Day after Christmas
    "2026-01-01",  # New Year
    "2026-01-02",  # DDO
    "2026-01-19",  # MLK Day
    "2026-02-09",  # DDO
    "2026-02-16",  # Presidents Day
    "2026-04-03",  # DDO
    "2026-05-25",  # Memorial Day
    "2026-06-19",  # Juneteenth
    "2026-07-03",  # Independence Day (observed)
    "2026-07-06",  # DDO
    "2026-08-07",  # DDO
    "2026-09-04",  # DDO
    "2026-09-07",  # Labor Day
    "2026-11-11",  # Veterans Day
    "2026-11-26",  # Thanksgiving
    "2026-11-27",  # Day after Thanksgiving
    "2026-12-24",  # Christmas Eve
    "2026-12-25",  # Christmas
    "2027-01-01",  # New Year
    "2027-01-18",  # MLK Day
    "2027-02-15",  # Presidents Day
    "2027-03-26",  # DDO
    "2027-05-28",  # DDO
    "2027-05-31",  # Memorial Day
    "2027-06-18",  # Juneteenth (observed)
    "2027-07-05",  # Independence Day (observed)
    "2027-07-08",  # DDO
]


def parse_cors(v: Any) -> List[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, (list, str)):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Site Schedule API"
    API_V1_STR: str = "/api/v1"

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FILE: Optional[str] = None

    BACKEND_CORS_ORIGINS: Annotated[List[str] | str, BeforeValidator(parse_cors)] = ["*"]

    # Working-day calendar
    HOLIDAYS: List[date] = [date.fromisoformat(d) for d in DEFAULT_HOLIDAYS]
    WEEKEND_DAYS: List[int] = [5, 6]  # Saturday, Sunday (Monday=0)

    # Load a small demo project into the in-memory store on startup
    SEED_DEMO_DATA: bool = False

    @field_validator("WEEKEND_DAYS")
    @classmethod
    def validate_weekend_days(cls, v: List[int]) -> List[int]:
        if any(not 0 <= d <= 6 for d in v):
            raise ValueError("WEEKEND_DAYS entries must be 0-6 (Monday=0, Sunday=6)")
        if len(set(v)) == 7:
            raise ValueError("WEEKEND_DAYS must leave at least one working weekday")
        return v


def build_calendar(s: Settings) -> WorkingCalendar:
    """The working-day calendar described by *s*."""
    return WorkingCalendar(
        holidays=frozenset(s.HOLIDAYS),
        weekend_days=frozenset(s.WEEKEND_DAYS),
    )


settings = Settings()
