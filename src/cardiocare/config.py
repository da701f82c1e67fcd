"""
Configuration for the CardioCare risk service.

Environment-based settings using pydantic-settings. Every field can be
overridden with a ``CARDIOCARE_``-prefixed variable or a ``.env`` file.
"""
import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CARDIOCARE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "CardioCare Risk API"
    app_version: str = "1.0"
    log_level: str = Field(default="INFO", description="Log level for the cardiocare package")

    # Batch / explain limits
    max_batch_size: int = Field(default=1000, ge=1, description="Max observations per list request")
    pdp_grid_size: int = Field(default=20, ge=2, description="Default grid points for PDP sweeps")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install a root handler for the running server. Call once at startup."""
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("cardiocare").setLevel(settings.log_level.upper())
