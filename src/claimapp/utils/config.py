"""
Configuration management using pydantic-settings.

Loads settings from environment variables and .env files.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.rules import RuleSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    storage_backend: Literal["memory", "sqlite"] = Field(
        default="sqlite",
        description="Claim store backend: 'memory' (per process) or 'sqlite' (file)",
    )
    db_path: Path = Field(
        default=Path("data") / "claims.db",
        description="SQLite database file used by the sqlite backend",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Root log level for the CLI",
    )

    # Business rule thresholds
    late_report_days: int = Field(
        default=30,
        description="Vehicle claims reported more than this many days ago need manual review",
    )
    escalation_threshold: Decimal = Field(
        default=Decimal("100000"),
        description="Property claims above this estimated value are escalated",
    )
    suspicious_lookback_days: int = Field(
        default=90,
        description="Window for counting earlier claims on the same vehicle",
    )
    suspicious_claim_threshold: int = Field(
        default=3,
        description="Earlier claims within the window that make a new claim suspicious",
    )
    travel_reporting_deadline_days: int = Field(
        default=14,
        description="Travel claims must be reported within this many days of returning",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def rule_settings(self) -> RuleSettings:
        """Thresholds for the business rule evaluator."""
        return RuleSettings(
            late_report_days=self.late_report_days,
            escalation_threshold=self.escalation_threshold,
            suspicious_lookback_days=self.suspicious_lookback_days,
            suspicious_claim_threshold=self.suspicious_claim_threshold,
            travel_reporting_deadline_days=self.travel_reporting_deadline_days,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to avoid re-reading environment on every call.
    """
    return Settings()
