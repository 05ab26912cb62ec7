"""Configuration management for FM Match."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "FM Match"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False, alias="DEBUG")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="FM_MATCH_LOG_LEVEL",
    )

    # Simulation
    random_seed: int | None = Field(default=None, alias="FM_MATCH_SEED")

    # Tracing (disabled unless explicitly switched on)
    trace_enabled: bool = Field(default=False, alias="FM_MATCH_TRACE")
    trace_sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        alias="FM_MATCH_TRACE_SAMPLE_RATE",
    )
    trace_throttle_ms: int = Field(
        default=0,
        ge=0,
        alias="FM_MATCH_TRACE_THROTTLE_MS",
    )

    # Live viewer
    live_tick_seconds: float = Field(
        default=0.05,
        ge=0.0,
        alias="FM_MATCH_LIVE_TICK_SECONDS",
    )

    @property
    def effective_log_level(self) -> str:
        """Debug mode always forces DEBUG logging."""
        return "DEBUG" if self.debug else self.log_level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
