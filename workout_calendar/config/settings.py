import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using an absolute path for the default SQLite file."""
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "workout_calendar.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.info(f"Using default database path: {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_serialize: bool = Field(
        default=False,
        validation_alias="LOG_SERIALIZE",
        description="Write the log file as JSON lines",
    )
    persistence_enabled: bool = Field(
        default=True,
        validation_alias="PERSISTENCE_ENABLED",
        description="Write series snapshots to the database after each change",
    )
    schedule_search_horizon_days: int = Field(
        default=730,
        validation_alias="SCHEDULE_SEARCH_HORIZON_DAYS",
        description="How far ahead next-occurrence lookups scan",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("schedule_search_horizon_days")
    @classmethod
    def validate_horizon(cls, value: int) -> int:
        if value < 1:
            logger.warning(f"SCHEDULE_SEARCH_HORIZON_DAYS must be positive, got {value}. Defaulting to 730.")
            return 730
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
