"""
Family Finance configuration.

Every setting comes from environment variables (or a .env file) through
pydantic-settings, one BaseSettings class per concern.

DESIGN DECISION: The remote sync section is optional. A household that
never configures Google Sheets still gets a fully working local app.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LocalStorageSettings(BaseSettings):
    """Local on-disk persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FAMILY_FINANCE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".family_finance",
        description="Directory holding the local JSON collections"
    )
    audit_file_name: str = Field(
        default="audit.jsonl",
        description="Append-only audit log file inside data_dir"
    )


class GoogleSheetsSettings(BaseSettings):
    """Shared remote store (Google Sheets) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    enabled: bool = Field(
        default=False,
        description="Synchronize the family data with the shared spreadsheet"
    )
    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the shared family spreadsheet"
    )
    family_secret: str = Field(
        ...,
        min_length=4,
        max_length=60,
        description="Shared secret that partitions the family dataset"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """A missing file only warns; sync may be enabled later."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before enabling sync."
            )
        return v

    @field_validator('family_secret')
    @classmethod
    def validate_family_secret(cls, v: str) -> str:
        """Worksheet titles cannot contain these characters."""
        forbidden = set("[]*?/\\:")
        if any(c in forbidden for c in v):
            raise ValueError("Family secret cannot contain []*?/\\: characters")
        return v.strip()


class AppSettings(BaseSettings):
    """Behaviour of forms and formatting."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency_symbol: str = Field(
        default="R$",
        description="Symbol used when formatting amounts"
    )

    # Validation thresholds
    max_transaction_amount: float = Field(
        default=100000.0,
        gt=0,
        description="Amounts above this are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=366,
        ge=0,
        description="How many days ahead a movement may start without a warning"
    )


class Settings(BaseSettings):
    """
    Entry point for every settings section.

    Sections are built on access, so a missing Google Sheets setup only
    fails when sync is actually used.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> LocalStorageSettings:
        return LocalStorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings. get_settings.cache_clear() forces a reload."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Startup check: build each section and report which ones fail.

    Returns {section: ok}, plus "<section>_error" for failures.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "google_sheets", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results


def sync_enabled(settings: Optional[Settings] = None) -> bool:
    """True when remote sync is switched on and fully configured."""
    settings = settings or get_settings()
    try:
        return settings.google_sheets.enabled
    except ValidationError:
        return False
