"""Configuration management for ttjr."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

TTJR_HOME = Path(os.environ.get("TTJR_HOME", Path.home() / ".ttjr"))
CONFIG_FILE = TTJR_HOME / "ttjr.conf"
DEFAULT_DB_PATH = TTJR_HOME / "ttjr.sqlite3"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """ttjr configuration."""

    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    listen_interval: float = 1.0
    log_level: str = "WARNING"


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from ttjr.conf file."""
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
        value = _unquote(value.strip())

        match key:
            case "db_path":
                config.db_path = Path(value).expanduser()
            case "listen_interval":
                try:
                    config.listen_interval = float(value)
                except ValueError:
                    logger.warning(f"Invalid LISTEN_INTERVAL {value!r}, keeping {config.listen_interval}")
            case "log_level":
                if value.upper() in LOG_LEVELS:
                    config.log_level = value.upper()
                else:
                    logger.warning(f"Invalid LOG_LEVEL {value!r}, keeping {config.log_level}")
            case _:
                logger.debug(f"Ignoring unknown config key {key!r}")

    return config
