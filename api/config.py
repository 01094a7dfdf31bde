"""
Configuration management for FuelPool API.
Loads environment variables and provides typed configuration.
"""
from typing import List
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ========================================================================
    # Database Configuration
    # ========================================================================
    database_url: str = "sqlite:///./fuelpool.db"
    db_echo: bool = False
    seed_on_startup: bool = False

    # ========================================================================
    # Redis Configuration (rate limit storage)
    # ========================================================================
    redis_url: str = "redis://localhost:6379/0"
    redis_enabled: bool = False

    # ========================================================================
    # API Configuration
    # ========================================================================
    api_key_header: str = "X-API-Key"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ========================================================================
    # CORS Configuration
    # ========================================================================
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ========================================================================
    # Security Configuration
    # ========================================================================
    auth_enabled: bool = True
    bcrypt_rounds: int = 12

    # ========================================================================
    # Rate Limiting
    # ========================================================================
    rate_limit_enabled: bool = True
    rate_limit_per_minute: int = 60

    # ========================================================================
    # Application Configuration
    # ========================================================================
    environment: str = "development"
    log_level: str = "info"
    debug: bool = False

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


def validate_production_settings(cfg: Settings) -> None:
    """Reject unsafe settings when running in production."""
    if not cfg.is_production:
        return

    if not cfg.auth_enabled:
        raise ValueError("AUTH_ENABLED must be true in production!")

    if "localhost" in cfg.cors_origins.lower():
        raise ValueError(
            "CORS_ORIGINS must not include localhost in production!"
        )


# Convenience exports
settings = get_settings()
validate_production_settings(settings)
