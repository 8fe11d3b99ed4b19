"""
Configuration Management for Personal Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Supabase backend (auth + tables + RPC) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        extra="ignore"
    )

    url: str = Field(
        ...,
        description="Supabase project URL"
    )
    anon_key: str = Field(
        ...,
        description="Supabase anon (public) API key"
    )

    # Table, view and RPC names on the backend
    transactions_table: str = Field(
        default="transactions",
        description="Table that receives inserts/updates/deletes"
    )
    transactions_view: str = Field(
        default="transaction_details",
        description="View used for listing transactions"
    )
    users_table: str = Field(
        default="users",
        description="Table holding user profiles"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets audit log configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


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

    # Pre-persistence limits
    max_name_length: int = Field(
        default=100,
        ge=1,
        description="Maximum transaction name length (after trimming)"
    )
    max_description_length: int = Field(
        default=255,
        ge=0,
        description="Maximum transaction description length"
    )
    max_amount: Decimal = Field(
        default=Decimal("999999999999.99"),
        gt=0,
        description="Largest absolute amount a single transaction may carry"
    )

    # History paging
    page_size: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="How many transactions to load per page"
    )

    # Balance counter animation
    balance_animation_steps: int = Field(
        default=20,
        ge=1,
        description="Divisor used to size each animation step"
    )
    balance_animation_interval_ms: int = Field(
        default=50,
        ge=1,
        description="Milliseconds between animation ticks"
    )

    currency_symbol: str = Field(
        default="₹",
        description="Symbol used when formatting amounts"
    )

    @property
    def balance_animation_interval(self) -> float:
        """Get the animation tick interval in seconds."""
        return self.balance_animation_interval_ms / 1000


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
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("supabase", "google_sheets", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
