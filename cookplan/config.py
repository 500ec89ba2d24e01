"""
Application configuration using Pydantic settings.

All configurable values are loaded from environment variables with sensible defaults.
Cooking limits mirror what a typical air fryer accepts; override them via env vars
(e.g. MAX_TEMPERATURE=230) for devices with a narrower range.
"""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator

# Get the directory containing this config file (cookplan/)
_PACKAGE_DIR = Path(__file__).parent.resolve()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App metadata
    app_name: str = "CookPlan"
    app_version: str = "0.1.0"
    debug: bool = False

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

    # Local session storage
    database_url: str = "sqlite:///cookplan.db"

    # Temperature limits (Celsius)
    min_temperature: int = 80  # Most air fryers minimum
    max_temperature: int = 260  # Most air fryers maximum
    default_temperature: int = 180  # Fallback for missing or too-low values

    # Duration limits (minutes)
    min_duration_minutes: int = 1
    max_duration_minutes: int = 120

    # Scheduling
    temperature_tolerance_celsius: float = 10.0  # Items within this range share a phase
    rest_between_phases_minutes: int = 2  # Gap for the chamber to change temperature

    # Execution
    timer_tick_seconds: float = 1.0  # Countdown resolution
    notification_audio_enabled: bool = True

    # History
    recent_sessions_limit: int = 10

    @model_validator(mode="after")
    def validate_cooking_limits(self) -> "Settings":
        """Ensure the configured cooking ranges are consistent."""
        if not self.min_temperature <= self.default_temperature <= self.max_temperature:
            raise ValueError(
                "CONFIG ERROR: DEFAULT_TEMPERATURE must lie between MIN_TEMPERATURE "
                f"({self.min_temperature}) and MAX_TEMPERATURE ({self.max_temperature})."
            )
        if self.min_duration_minutes < 1 or self.min_duration_minutes > self.max_duration_minutes:
            raise ValueError(
                "CONFIG ERROR: MIN_DURATION_MINUTES must be at least 1 and not exceed "
                f"MAX_DURATION_MINUTES ({self.max_duration_minutes})."
            )
        if self.timer_tick_seconds <= 0:
            raise ValueError("CONFIG ERROR: TIMER_TICK_SECONDS must be positive.")
        return self

    model_config = SettingsConfigDict(
        env_file=_PACKAGE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


def get_settings(**overrides) -> Settings:
    """
    Factory function to create Settings instance.

    Useful for testing where you need to override specific values
    without modifying environment variables.

    Args:
        **overrides: Key-value pairs to override default settings

    Returns:
        Settings instance with overrides applied

    Example:
        test_settings = get_settings(rest_between_phases_minutes=0)
    """
    return Settings(**overrides)


# Global settings instance (lazy initialization for testability)
# In tests, you can reload this module or use get_settings() directly
settings = get_settings()
