from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HINTS_TABLE = "hints"
CATALOG_FIELDS = ("continent", "country", "meta_type")

QUIZ_SAMPLE_SIZE = 1000
QUIZ_OPTION_COUNT = 4

# PostgREST returns at most max-rows (1000 by default) per request.
STORE_PAGE_SIZE = 1000

MIN_DESCRIPTION_LENGTH = 10
UNKNOWN_CONTINENT = "Unknown"

# Rough number of metas Plonkit documents per country.
PLONKIT_REFERENCE_TOTAL = 100
COVERAGE_BANDS = {
    "high": 80.0,
    "medium": 50.0,
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_LOG_LEVEL = "INFO"

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class ConfigurationError(RuntimeError):
    """Raised when required runtime configuration is missing or invalid."""


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or ``.env``."""

    supabase_url: Optional[str] = Field(default=None, validation_alias="SUPABASE_URL")
    # The anon key is what the Supabase dashboard labels it, so accept either name.
    supabase_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_KEY", "SUPABASE_ANON_KEY"),
    )
    hints_table: str = Field(default=HINTS_TABLE, validation_alias="GEOMETA_HINTS_TABLE")
    log_level: LogLevel = Field(default=DEFAULT_LOG_LEVEL, validation_alias="GEOMETA_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("hints_table")
    @classmethod
    def default_blank_table(cls, value: str) -> str:
        return value or HINTS_TABLE

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper() or DEFAULT_LOG_LEVEL
        return value

    @property
    def has_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def require_credentials(self) -> tuple[str, str]:
        if not self.has_credentials:
            raise ConfigurationError(
                "SUPABASE_URL and SUPABASE_KEY must be set to reach the hint store"
            )
        return self.supabase_url, self.supabase_key  # type: ignore[return-value]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    try:
        return Settings()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from exc


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or get_settings().log_level),
        format=LOG_FORMAT,
    )
