"""
Configuration management for the Resource Booking service.

Uses Pydantic Settings for type-safe environment variable loading.
Configured via .env file in project root.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    """

    # Python & Application
    python_env: Literal["development", "production"] = Field(
        default="development",
        description="Application environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )

    # Storage
    storage_backend: Literal["memory", "sqlalchemy"] = Field(
        default="memory",
        description="Where resources and bookings live (process memory or a database)"
    )
    database_url: str = Field(
        default="sqlite:///./data/resource_booking.db",
        description="Database connection URL (used by the sqlalchemy backend)"
    )

    # Utilization statistics
    hours_per_day: float = Field(
        default=8.0,
        gt=0,
        description="Bookable hours assumed per day when computing utilization"
    )
    default_stats_period_days: int = Field(
        default=30,
        ge=1,
        description="Period length used for stats when no date range is supplied"
    )

    # API Configuration
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8000,
        description="API server port"
    )
    api_reload: bool = Field(
        default=True,
        description="Enable auto-reload in development"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.python_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.python_env == "production"

    @property
    def uses_database(self) -> bool:
        """Check if the SQLAlchemy store is the configured backend."""
        return self.storage_backend == "sqlalchemy"

    @property
    def uses_postgresql(self) -> bool:
        """Check if PostgreSQL is the configured database."""
        return "postgresql" in self.database_url.lower()

    def validate_production_config(self) -> None:
        """
        Validate configuration for production environment.

        Raises:
            ValueError: If required production settings are missing or invalid
        """
        if not self.is_production:
            return

        errors = []

        if not self.uses_database:
            errors.append(
                "Production requires a database. "
                "Set STORAGE_BACKEND=sqlalchemy."
            )
        elif not self.uses_postgresql:
            errors.append(
                "Production requires PostgreSQL. "
                "Set DATABASE_URL to a PostgreSQL connection string."
            )

        if errors:
            raise ValueError("Production configuration errors:\n- " + "\n- ".join(errors))


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure we only load settings once.
    Use this function throughout the application to access settings.

    Returns:
        Settings instance loaded from environment

    Example:
        >>> from resource_booking.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.storage_backend)
    """
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging for the service.

    Args:
        level: Logging level name (defaults to Settings.log_level)
    """
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
