"""Configuration management for amexecutor."""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings are read once at startup and never change afterwards.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AMEXECUTOR_",
        extra="ignore",
        frozen=True,
    )

    # Server settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4242)
    log_level: str = Field(default="INFO")
    verbose: bool = Field(default=False, description="Log request and response bodies")
    max_body_size: int = Field(default=1024 * 1024, gt=0, description="Request body limit in bytes")

    # Handlers configuration
    handlers_config: str = Field(default="config.yaml")

    # Command execution
    debug: bool = Field(default=False, description="Log handler commands instead of running them")
    # Seconds ("30", "2.5") or an ISO 8601 duration ("PT30S", "PT1M").
    timeout: timedelta = Field(default=timedelta(seconds=30), gt=timedelta(0))
    max_concurrent_commands: int = Field(default=0, ge=0, description="0 means unbounded")

    @property
    def handlers_config_path(self) -> Path:
        return Path(self.handlers_config)


@lru_cache
def get_settings() -> Settings:
    return Settings()
