"""Configuration management for Dayboard."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.calendar import ANNIVERSARY_RETENTION_YEARS, RECURRENCE_YEARS

logger = logging.getLogger(__name__)

DAYBOARD_HOME = Path(os.environ.get("DAYBOARD_HOME", Path.home() / "dayboard"))
CONFIG_FILE = DAYBOARD_HOME / "config" / "dayboard.conf"
DATA_DIR = DAYBOARD_HOME / "data"

ID_STYLES = ("uuid", "short")


@dataclass
class Config:
    """Dayboard configuration."""

    data_dir: str = ""
    recurrence_years: int = RECURRENCE_YEARS
    anniversary_retention_years: int = ANNIVERSARY_RETENTION_YEARS
    id_style: str = "uuid"
    log_level: str = "WARNING"

    @property
    def data_path(self) -> Path:
        """Resolved storage directory."""
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default
    if parsed < 0:
        logger.warning(f"{key.upper()} must not be negative, using {default}")
        return default
    return parsed


def _strip_value(value: str) -> str:
    """Handle quoted values and inline comments: "value" # comment"""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from dayboard.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _strip_value(value.strip())

        match key:
            case "data_dir":
                config.data_dir = value
            case "recurrence_years":
                config.recurrence_years = _parse_int(key, value, config.recurrence_years)
            case "anniversary_retention_years":
                config.anniversary_retention_years = _parse_int(
                    key, value, config.anniversary_retention_years
                )
            case "id_style":
                if value.lower() in ID_STYLES:
                    config.id_style = value.lower()
                else:
                    logger.warning(f"Unknown ID_STYLE {value!r}, expected one of {ID_STYLES}")
            case "log_level":
                config.log_level = value.upper()
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    return config
