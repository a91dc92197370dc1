# src/fxbackend/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables or a .env file.

Files that USE this module:
- fxbackend.app (builds the backend and logging from settings)
- fxbackend.adapters.providers.* (endpoint URLs and HTTP timeout)
- fxbackend.application.rate_provider (spread, pairs and curve probe defaults)

Files that this module USES:
- fxbackend.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from typing import Literal, Optional  # Type hints for enumerated and optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from fxbackend.shared.validators import (
    validate_currency_code,
    validate_ledger_asset,
    validate_spread,
)


class Settings(BaseSettings):
    """Backend settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Quoting ---
    spread: float = Field(default=0.0, alias="FX_SPREAD")
    base_currency: str = Field(default="USD", alias="FX_BASE_CURRENCY")
    currencies: list[str] = Field(default_factory=list, alias="FX_CURRENCIES")
    ledger_pairs: list[list[str]] = Field(default_factory=list, alias="FX_LEDGER_PAIRS")
    curve_probe: Literal["fixed", "requested"] = Field(default="fixed", alias="FX_CURVE_PROBE")
    probe_source_amount: int = Field(default=100000000, alias="FX_PROBE_SOURCE_AMOUNT", gt=0)

    # --- Rate source ---
    rate_source: Literal["yql", "symbols"] = Field(default="yql", alias="FX_RATE_SOURCE")
    yql_url: str = Field(default="https://query.yahooapis.com/v1/public/yql", alias="FX_YQL_URL")
    yql_env: str = Field(default="store://datatables.org/alltableswithkeys", alias="FX_YQL_ENV")
    symbols_url: str = Field(
        default="https://finance.yahoo.com/webservice/v1/symbols/allcurrencies/quote",
        alias="FX_SYMBOLS_URL",
    )

    # --- HTTP Settings ---
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)

    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="FXBACKEND_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @field_validator("spread")
    @classmethod
    def validate_spread(cls, v: float) -> float:
        if not validate_spread(v):
            raise ValueError("FX_SPREAD must be in [0, 1)")
        return v

    @field_validator("base_currency")
    @classmethod
    def validate_base_currency(cls, v: str) -> str:
        v = v.upper()
        if not validate_currency_code(v):
            raise ValueError("FX_BASE_CURRENCY must be a three-letter currency code")
        return v

    @field_validator("currencies")
    @classmethod
    def validate_currencies(cls, v: list[str]) -> list[str]:
        codes = [c.upper() for c in v]
        for code in codes:
            if not validate_currency_code(code):
                raise ValueError(f"Invalid currency code in FX_CURRENCIES: {code!r}")
        return codes

    @field_validator("ledger_pairs")
    @classmethod
    def validate_ledger_pairs(cls, v: list[list[str]]) -> list[list[str]]:
        for pair in v:
            if len(pair) != 2 or not all(validate_ledger_asset(asset) for asset in pair):
                raise ValueError(f"Invalid ledger pair in FX_LEDGER_PAIRS: {pair!r}")
        return v


# Global settings instance
settings = Settings()
