from datetime import UTC, datetime
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Replaces the deprecated ``datetime.utcnow()`` while keeping datetimes
    naive so they stay compatible with SQLite (which doesn't store tz info).
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    database_url: str = f"sqlite+aiosqlite:///{Path(__file__).resolve().parent.parent / 'data' / 'koine_srs.db'}"
    debug: bool = False

    # Scheduler tuning
    learning_steps: tuple[int, ...] = (1, 10)  # minutes
    graduating_interval: int = 1  # days
    easy_interval: int = 4  # days
    initial_ease: float = 2.5
    min_ease: float = 1.3
    max_ease: float = 3.0
    interval_modifier: float = 1.0
    max_interval: int = 365  # days
    day_start_hour: int = Field(default=4, ge=0, le=23)  # graduated reviews fall due at this hour

    # Leech warnings
    leech_threshold: int = 8
    leech_warning_threshold: int = 5

    # Queue / dashboard
    max_new_cards_per_session: int = 20
    max_reviews_per_session: int = 100
    new_card_ratio: float = 0.25
    forecast_days: int = 7

    model_config = {"env_prefix": "KOINE_SRS_", "env_file": ".env"}


settings = Settings()
