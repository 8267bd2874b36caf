"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each concern gets its own settings class with its own env prefix, and the
root Settings object loads them lazily so a partially configured
environment (e.g. no offline data path on a server) still starts.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """HTTP service configuration (server bind address and client base URL)."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL the client uses to reach the ledger service"
    )
    host: str = Field(
        default="0.0.0.0",
        description="Interface the server binds to"
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port the server listens on"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Client-side timeout for a single request"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class OfflineSettings(BaseSettings):
    """Device-local storage configuration for the offline mirror."""

    model_config = SettingsConfigDict(
        env_prefix="OFFLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_path: Path = Field(
        default=Path.home() / ".finance_tracker" / "ledger.json",
        description="JSON document holding the offline ledger"
    )
    native_bridge: bool = Field(
        default=False,
        description="Force offline mode as if a native mobile bridge was detected"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    # Single-user ownership
    default_user_id: str = Field(
        default="default-user",
        min_length=1,
        description="Owner of every record"
    )

    # Aggregation windows
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Number of recent transactions on the dashboard"
    )
    evolution_months: int = Field(
        default=6,
        ge=1,
        le=36,
        description="Months kept in the monthly evolution series"
    )
    top_categories_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Categories kept in the expense breakdown"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def offline(self) -> OfflineSettings:
        return OfflineSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    `<name>_error` entry for each group that failed to load.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("api", "offline", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
