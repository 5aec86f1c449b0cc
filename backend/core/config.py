"""
Application configuration loaded from the environment.

Secrets and connection strings come from environment variables or a
``.env`` file; reservation policy defaults live here so they can be tuned
per deployment without code changes.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "dev-secret-change-in-production"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Database Configuration
    database_url: str = "sqlite:///./reservations.db"
    log_sql_queries: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # JWT Authentication - MUST be overridden in production
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "reservations-api"
    jwt_audience: str = "reservations-clients"
    jwt_access_token_expire_minutes: int = 30
    jwt_leeway_seconds: int = 120

    cors_origins: List[str] = ["http://localhost:3000"]

    # Environment Settings
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Reservation policy
    reservation_slot_interval_minutes: int = 15
    reservation_default_duration_minutes: int = 90
    reservation_min_duration_minutes: int = 30
    reservation_max_duration_minutes: int = 240
    reservation_max_party_size: int = 20
    reservation_deposit_party_size: Optional[int] = None  # None = deposits off
    reservation_allocation_retries: int = 1

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("reservation_slot_interval_minutes")
    @classmethod
    def validate_slot_interval(cls, v):
        if v <= 0 or 60 % v != 0:
            raise ValueError("Slot interval must be a positive divisor of 60")
        return v

    @model_validator(mode="after")
    def validate_durations(self):
        interval = self.reservation_slot_interval_minutes
        for name in (
            "reservation_default_duration_minutes",
            "reservation_min_duration_minutes",
            "reservation_max_duration_minutes",
        ):
            if getattr(self, name) % interval != 0:
                raise ValueError(f"{name} must be a multiple of {interval} minutes")
        if not (
            self.reservation_min_duration_minutes
            <= self.reservation_default_duration_minutes
            <= self.reservation_max_duration_minutes
        ):
            raise ValueError("Default reservation duration must lie within min/max")
        if self.environment.lower() == "production" and self.jwt_secret_key == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set to a secure value in production")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()


settings = get_settings()
