"""
Configuration Management for Expense Analytics

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable (store location, retry policy, dashboard thresholds) is read
once and validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from expense_analytics.models.expense import DEFAULT_CATEGORIES


class RemoteStoreSettings(BaseSettings):
    """REST expense store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_STORE_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the expense REST API"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-request HTTP timeout"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for idempotent reads before giving up"
    )
    retry_wait_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Base of the exponential backoff between read attempts"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are appended with a leading slash."""
        return v.rstrip("/")


class AnalyticsSettings(BaseSettings):
    """Dashboard and forecast configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_ANALYTICS_",
        extra="ignore"
    )

    categories: str = Field(
        default=",".join(DEFAULT_CATEGORIES),
        description="Comma-separated categories reported by budget status, in order"
    )
    forecast_horizon: int = Field(
        default=5,
        ge=1,
        le=365,
        description="Number of future points to predict"
    )
    recent_count: int = Field(
        default=5,
        ge=1,
        description="How many recent expenses the dashboard shows"
    )
    warning_threshold_percent: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Budget utilization at which a category turns to warning"
    )

    @property
    def categories_list(self) -> list[str]:
        """Get categories as a list, preserving order."""
        return [c.strip() for c in self.categories.split(",") if c.strip()]


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
        description="Enable debug logging"
    )


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

    @property
    def remote_store(self) -> RemoteStoreSettings:
        return RemoteStoreSettings()

    @property
    def analytics(self) -> AnalyticsSettings:
        return AnalyticsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a `<name>_error`
    entry for each section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("remote_store", "analytics", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
