"""Editor configuration loaded from environment variables."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class EditorConfig(BaseSettings):
    """Availability editor configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Partner API
    api_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the partner API (no trailing slash)",
    )
    api_token: str = Field(
        default="",
        description="Bearer token for the partner API",
    )
    partner_id: str = Field(
        default="demo-partner-1",
        description="Partner whose weekly schedule is edited",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for each HTTP request to the partner API",
    )
    sync_retry_attempts: int = Field(
        default=3,
        description="Attempts for fetch/save before giving up on transient errors",
    )

    # Grid geometry
    slot_duration_minutes: int = Field(
        default=30,
        description="Length of one bookable slot; must divide 1440",
    )
    hour_height_px: float = Field(
        default=60.0,
        description="Pixel height of one hour on a day column",
    )
    week_start: int = Field(
        default=1,
        description="First day column (0=Sunday, 1=Monday, ...)",
    )

    # Schedule metadata written on save
    buffer_time_minutes: int = Field(
        default=15,
        description="Time between bookings, persisted with the schedule",
    )
    max_advance_booking_days: int = Field(
        default=14,
        description="How far ahead customers may book, persisted with the schedule",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "AVAILABILITY_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("slot_duration_minutes")
    @classmethod
    def _divides_day(cls, value: int) -> int:
        if value <= 0 or 1440 % value:
            raise ValueError("slot_duration_minutes must be a positive divisor of 1440")
        return value

    @field_validator("week_start")
    @classmethod
    def _valid_weekday(cls, value: int) -> int:
        if not 0 <= value <= 6:
            raise ValueError("week_start must be between 0 and 6")
        return value


# Singleton pattern
_config: EditorConfig | None = None


def get_config() -> EditorConfig:
    """Get the editor configuration singleton.

    Returns:
        EditorConfig: Editor configuration instance
    """
    global _config
    if _config is None:
        _config = EditorConfig()
    return _config
