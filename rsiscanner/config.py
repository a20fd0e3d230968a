"""Scanner configuration loaded from a TOML file."""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator

from rsiscanner.data.base import DEFAULT_TIMEFRAME, TIMEFRAMES

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "rsiscanner"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
CONFIG_ENV_VAR = "RSISCANNER_CONFIG"


class ScannerSection(BaseModel):
    refresh_seconds: float = Field(default=60.0, gt=0, description="Refresh interval")
    timeframe: str = Field(default=DEFAULT_TIMEFRAME, description="Default timeframe")
    rsi_period: int = Field(default=14, ge=1, description="RSI period")
    history_limit: int = Field(default=100, ge=2, le=1000, description="Candles per fetch")

    model_config = {"frozen": True}

    @field_validator("timeframe")
    @classmethod
    def _known_timeframe(cls, value: str) -> str:
        if value not in TIMEFRAMES:
            raise ValueError(f"must be one of {list(TIMEFRAMES)}")
        return value


class AlertsSection(BaseModel):
    display_seconds: float = Field(default=5.0, gt=0, description="Toast lifetime")

    model_config = {"frozen": True}


class DataSection(BaseModel):
    source: Literal["binance", "simulated"] = Field(default="binance", description="Candle source")
    base_url: str = Field(default="https://api.binance.com", description="Binance API root")
    timeout_seconds: float = Field(default=10.0, gt=0, description="HTTP timeout")

    model_config = {"frozen": True}


class StorageSection(BaseModel):
    db_path: Path = Field(default=CONFIG_DIR / "rsiscanner.db", description="Settings database")

    model_config = {"frozen": True}

    @field_validator("db_path")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()


class LoggingSection(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    model_config = {"frozen": True}


class ScannerConfig(BaseModel):
    """Complete scanner configuration."""

    scanner: ScannerSection = Field(default_factory=ScannerSection)
    alerts: AlertsSection = Field(default_factory=AlertsSection)
    data: DataSection = Field(default_factory=DataSection)
    storage: StorageSection = Field(default_factory=StorageSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)

    model_config = {"frozen": True}


def get_config_path(path: Optional[Path] = None) -> Path:
    """Resolve the config file location (argument, env var, then default)."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Optional[Path] = None) -> ScannerConfig:
    """Load configuration, falling back to defaults.

    A missing file gives the defaults silently. A file that cannot be parsed
    or holds invalid values is logged and ignored as a whole.

    Args:
        path: Optional explicit config file path.

    Returns:
        The loaded configuration.
    """
    config_path = get_config_path(path)

    if not config_path.exists():
        return ScannerConfig()

    try:
        raw = toml.load(config_path)
    except (toml.TomlDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return ScannerConfig()

    try:
        return ScannerConfig.model_validate(raw)
    except ValidationError as e:
        logger.warning("Ignoring invalid config %s: %s", config_path, e)
        return ScannerConfig()
