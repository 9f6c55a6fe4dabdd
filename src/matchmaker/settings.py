"""Matchmaker configuration."""

from datetime import timedelta
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchmakerSettings(BaseSettings):
    """Matchmaker settings loaded from environment variables.

    Durations accept seconds (e.g. ``MATCHMAKER_MINIMUM_WAIT_TIME=5``) or
    ISO 8601 strings. Settings are frozen once constructed.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATCHMAKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Queue policy
    minimum_wait_time: timedelta = timedelta(seconds=5)
    maximum_wait_time: timedelta = timedelta(seconds=30)
    shuffle_players: bool = True
    enable_bot_fill: bool = True

    # Sweep scheduling
    sweep_interval: timedelta = timedelta(seconds=1)

    # Logging
    log_level: str = "INFO"

    @field_validator("minimum_wait_time", "maximum_wait_time", "sweep_interval", mode="before")
    @classmethod
    def _parse_seconds(cls, value: object) -> object:
        # Plain numbers from the environment are seconds
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return value
        return value

    @model_validator(mode="after")
    def _check_durations(self) -> "MatchmakerSettings":
        if self.minimum_wait_time < timedelta(0):
            raise ValueError("minimum_wait_time must not be negative")
        if self.maximum_wait_time < self.minimum_wait_time:
            raise ValueError("maximum_wait_time must be at least minimum_wait_time")
        if self.sweep_interval <= timedelta(0):
            raise ValueError("sweep_interval must be positive")
        return self

    @property
    def sweep_interval_seconds(self) -> float:
        """Sweep interval as float seconds, for asyncio timeouts."""
        return self.sweep_interval.total_seconds()


@lru_cache
def get_settings() -> MatchmakerSettings:
    """Get cached settings instance."""
    return MatchmakerSettings()
