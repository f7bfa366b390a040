"""
Configuration Management for finledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Everything the ledger can be tuned with is visible in one place and
validated when first loaded.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Ledger settings.

    Loads configuration from FINLEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage
    storage_path: Optional[Path] = Field(
        default=None,
        description="JSON file backing the key-value store (unset = in-memory)"
    )

    # Seed data
    default_currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="Currency of the seed account"
    )
    seed_account_name: str = Field(
        default="1st account",
        min_length=1,
        description="Name of the account created on first use"
    )
    seed_account_color: str = Field(
        default="#40e07d",
        description="Display color of the seed account"
    )

    # Budgets
    budget_warning_threshold: float = Field(
        default=90.0,
        ge=0.0,
        le=100.0,
        description="Percentage of budget above which a category is flagged"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level for the ledger logger"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get ledger settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
