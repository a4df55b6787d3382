"""Configuration management for daylog."""

import getpass
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DAYLOG_HOME = Path(os.environ.get("DAYLOG_HOME", Path.home() / "daylog"))
CONFIG_FILE = DAYLOG_HOME / "config" / "daylog.conf"
DATA_DIR = DAYLOG_HOME / "data"


def _default_owner() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "me"


@dataclass
class Config:
    """daylog configuration."""

    owner_id: str = field(default_factory=_default_owner)
    timezone: str = "UTC"
    db_path: str = str(DATA_DIR / "daylog.db")
    window_days: int = 7
    google_config_folder: str = str(DAYLOG_HOME / "config" / "google")
    google_client_secret_file: str = ""
    google_calendars: list[str] = field(default_factory=list)


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from daylog.conf file."""
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
            case "owner_id":
                config.owner_id = value
            case "timezone":
                try:
                    ZoneInfo(value)
                except (ZoneInfoNotFoundError, ValueError):
                    logger.warning(f"Unknown TIMEZONE value: {value!r}")
                else:
                    config.timezone = value
            case "db_path":
                config.db_path = value
            case "window_days":
                try:
                    config.window_days = int(value)
                except ValueError:
                    logger.warning(f"Invalid WINDOW_DAYS value: {value!r}")
            case "google_config_folder":
                config.google_config_folder = value
            case "google_client_secret_file":
                config.google_client_secret_file = value
            case "google_calendars":
                config.google_calendars = [c.strip() for c in value.split(",") if c.strip()]

    return config
