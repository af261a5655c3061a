from __future__ import annotations

from decimal import Decimal
from functools import cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppSettings(BaseSettings):
    tax_rate: Decimal = Decimal("0.20")
    exemption_threshold: Decimal = Decimal("20000")
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="GAINS_TAX_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("tax_rate")
    @classmethod
    def _validate_tax_rate(cls, value: Decimal) -> Decimal:
        if not Decimal("0") <= value <= Decimal("1"):
            raise ValueError("tax_rate must be within [0, 1]")
        return value

    @field_validator("exemption_threshold")
    @classmethod
    def _validate_threshold(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("exemption_threshold must be >= 0")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


@cache
def config() -> AppSettings:
    return AppSettings()
