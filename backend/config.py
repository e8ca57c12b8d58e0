from datetime import UTC, datetime
from pathlib import Path

from pydantic_settings import BaseSettings


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Replaces the deprecated ``datetime.utcnow()`` while keeping datetimes
    naive so they stay compatible with SQLite (which doesn't store tz info).
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    app_name: str = "StuDeck"
    database_url: str = f"sqlite+aiosqlite:///{Path(__file__).resolve().parent.parent / 'data' / 'studeck.db'}"
    default_due_limit: int = 50
    max_due_limit: int = 500
    max_reviews_per_batch: int = 200
    log_level: str = "INFO"
    debug: bool = False

    model_config = {"env_prefix": "STUDECK_", "env_file": ".env"}


settings = Settings()
