"""
Engine configuration using pydantic-settings.

Environment variables (prefix: CASHFLOW_):
    CASHFLOW_SEED            - Default RNG seed for simulated games (default: unset)
    CASHFLOW_LOG_LEVEL       - Root log level for the CLI (default: INFO)
    CASHFLOW_CARD_DATA_PATH  - Optional JSON file replacing the built-in card tables
    CASHFLOW_MAX_ITERATIONS  - Safety cap on agent actions per simulated game
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Runtime options for simulations and data loading."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="CASHFLOW_",
    )

    seed: Optional[int] = Field(
        default=None,
        description="Default RNG seed for simulated games.",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level applied by configure_logging().",
    )
    card_data_path: Optional[Path] = Field(
        default=None,
        description="JSON file with smallDeal/bigDeal/offer/doodad tables.",
    )
    max_iterations: int = Field(
        default=20000,
        gt=0,
        description="Safety cap on agent actions in a single simulated game.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, value: Optional[str]) -> str:
        """Accept lowercase names and fall back to INFO for unknown levels."""
        if not value:
            return "INFO"
        name = str(value).upper()
        if not isinstance(logging.getLevelName(name), int):
            return "INFO"
        return name


@lru_cache
def get_engine_settings() -> EngineSettings:
    """Return cached engine settings instance."""
    return EngineSettings()


def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    """Configure the root logger from engine settings."""
    settings = settings or get_engine_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
