"""
Engine configuration parameters for dutchswap.

Defines the custody account, payment asset, persistence and logging
settings. Values come from defaults, an optional JSON file and the
environment (optionally loaded from a .env file), in that order.
"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "DUTCHSWAP_"


@dataclass
class EngineConfig:
    """Engine-wide configuration parameters"""

    # Custody
    escrow_account: str = "dutchswap:escrow"  # Root of the per-seller custody accounts
    payment_asset: str = "native"  # Asset buyers pay with

    # Persistence
    persistence_enabled: bool = False  # In-memory registry unless enabled
    data_dir: Path = Path("data")
    db_name: str = "auctions.db"

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    log_to_file: bool = False

    def __post_init__(self):
        """Normalize paths and reject unusable values"""
        self.data_dir = Path(self.data_dir)
        self.log_dir = Path(self.log_dir)
        self.log_level = self.log_level.upper()

        if not self.escrow_account:
            raise ValueError("escrow_account must not be empty")
        if not self.payment_asset:
            raise ValueError("payment_asset must not be empty")
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class ConfigFile(BaseModel):
    """Schema of a JSON config file. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    escrow_account: Optional[str] = Field(default=None, min_length=1)
    payment_asset: Optional[str] = Field(default=None, min_length=1)
    persistence_enabled: Optional[bool] = None
    data_dir: Optional[Path] = None
    db_name: Optional[str] = Field(default=None, min_length=1)
    log_level: Optional[str] = None
    log_dir: Optional[Path] = None
    log_to_file: Optional[bool] = None


def _env_overrides(env: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """Pick DUTCHSWAP_* variables matching EngineConfig fields."""
    overrides: Dict[str, Any] = {}
    for f in fields(EngineConfig):
        raw = env.get(ENV_PREFIX + f.name.upper())
        if raw is None:
            continue
        if f.type is bool or f.type == "bool":
            overrides[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
        else:
            overrides[f.name] = raw
    return overrides


def load_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> EngineConfig:
    """
    Load configuration from file and environment, or use defaults.

    Args:
        config_path: Optional path to a JSON config file
        env_file: Optional path to a .env file; its values are overridden
            by real environment variables

    Returns:
        EngineConfig instance
    """
    values: Dict[str, Any] = {}

    if config_path:
        raw = json.loads(Path(config_path).read_text(encoding="utf-8"))
        parsed = ConfigFile.model_validate(raw)
        values.update(parsed.model_dump(exclude_none=True))

    env: Dict[str, Optional[str]] = {}
    if env_file:
        env.update(dotenv_values(env_file))
    env.update(os.environ)
    values.update(_env_overrides(env))

    return EngineConfig(**values)
