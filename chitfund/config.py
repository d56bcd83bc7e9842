"""Configuration settings for the chit fund ledger service."""
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from CHITFUND_* environment variables."""

    app_name: str = "Chit Fund Ledger API"
    company_name: str = "SRI SAI BANGARAMMA"
    currency_symbol: str = "Rs."

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Storage
    seed_demo_data: bool = True
    data_file: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix="CHITFUND_", env_file=".env")

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Unknown log level {value!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
