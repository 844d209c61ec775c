"""Runtime settings and store configuration.

Two layers:

- ``LedgerSettings``: where things live (data file, YAML config file,
  log level). Loads from environment variables and a .env file.
  Prefix: STOCK_LEDGER_.
- ``StoreConfig``: how the ledger behaves (thresholds, expiry window,
  undo depth, CSV layout, manager roster). Loaded from YAML and
  validated at startup.

Usage:
    from stock_ledger.config import get_settings, load_store_config

    settings = get_settings()
    config = load_store_config(settings.config_file)
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("stock_ledger.config")

LOW_STOCK_THRESHOLD = 5
OVER_STOCK_THRESHOLD = 100
EXPIRING_WINDOW_DAYS = 7


class LedgerSettings(BaseSettings):
    """Environment-driven settings for the CLI."""

    data_file: str = Field(
        default="inventory.csv",
        description="Path to the inventory CSV file.",
    )
    config_file: str | None = Field(
        default=None,
        description="Optional YAML store config. Defaults apply when unset.",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level for the CLI.",
    )

    model_config = SettingsConfigDict(
        env_prefix="STOCK_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> LedgerSettings:
    """Get cached settings singleton."""
    return LedgerSettings()


class StoreConfig(BaseModel):
    """Behavioural configuration injected into the Ledger."""

    low_stock_threshold: int = Field(default=LOW_STOCK_THRESHOLD, ge=0)
    over_stock_threshold: int = Field(default=OVER_STOCK_THRESHOLD, ge=0)
    expiring_window_days: int = Field(default=EXPIRING_WINDOW_DAYS, ge=0)
    undo_depth: int = Field(default=20, ge=1)
    per_batch_csv: bool = Field(
        default=False,
        description="Write one CSV row per batch instead of one per item.",
    )
    managers: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_threshold_order(self) -> StoreConfig:
        if self.low_stock_threshold >= self.over_stock_threshold:
            raise ValueError(
                f"low_stock_threshold ({self.low_stock_threshold}) must be "
                f"below over_stock_threshold ({self.over_stock_threshold})"
            )
        return self

    def is_manager(self, name: str) -> bool:
        """Case-insensitive check against the closed manager roster."""
        wanted = name.strip().lower()
        return any(m.strip().lower() == wanted for m in self.managers)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_store_config(path: str | Path | None) -> StoreConfig:
    """Load and validate a store config file.

    A missing or unset path yields the defaults.

    Raises:
        pydantic.ValidationError: If the file content is invalid.
    """
    if path is None:
        return StoreConfig()

    path = Path(path)
    if not path.exists():
        logger.warning("Store config not found at %s, using defaults", path)
        return StoreConfig()

    config = StoreConfig(**_load_yaml(path))
    logger.info(
        "Loaded store config from %s: low<%d, over>%d, %d managers",
        path,
        config.low_stock_threshold,
        config.over_stock_threshold,
        len(config.managers),
    )
    return config
