"""Configuration management for tasktally."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo

from .core.scoring import MONTHLY_REFERENCE_CAP, WEEKLY_REFERENCE_CAP

logger = logging.getLogger(__name__)

TALLY_HOME = Path(os.environ.get("TALLY_HOME", Path.home() / "tally"))
CONFIG_FILE = TALLY_HOME / "config" / "tally.conf"
SESSION_FILE = TALLY_HOME / "config" / ".session.json"
DATA_DIR = TALLY_HOME / "data"


@dataclass
class Config:
    """tasktally configuration."""

    backend: str = "file"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    # Service role key bypasses row-level security; only the reset job uses it
    supabase_service_key: str = ""
    local_user: str = "me"
    data_dir: str = ""
    timezone: str = "UTC"
    reset_time: str = "00:00"
    weekly_reference_cap: int = WEEKLY_REFERENCE_CAP
    monthly_reference_cap: int = MONTHLY_REFERENCE_CAP

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone or "UTC")

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


@dataclass
class Session:
    """Signed-in Supabase session."""

    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0
    user_id: str = ""

    def save(self) -> None:
        """Save session to file."""
        SESSION_FILE.parent.mkdir(parents=True, exist_ok=True)
        SESSION_FILE.write_text(
            json.dumps(
                {
                    "access_token": self.access_token,
                    "refresh_token": self.refresh_token,
                    "expires_at": self.expires_at,
                    "user_id": self.user_id,
                }
            )
        )
        SESSION_FILE.chmod(0o600)

    @classmethod
    def load(cls) -> "Session":
        """Load session from file."""
        if not SESSION_FILE.exists():
            return cls()
        try:
            data = json.loads(SESSION_FILE.read_text())
            return cls(
                access_token=data.get("access_token", ""),
                refresh_token=data.get("refresh_token", ""),
                expires_at=data.get("expires_at", 0),
                user_id=data.get("user_id", ""),
            )
        except (json.JSONDecodeError, KeyError):
            return cls()

    @staticmethod
    def clear() -> None:
        SESSION_FILE.unlink(missing_ok=True)


def _parse_cap(key: str, value: str, default: int) -> int:
    try:
        cap = int(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key.upper()}: {value!r}")
        return default
    if cap <= 0:
        logger.warning(f"Ignoring non-positive {key.upper()}: {cap}")
        return default
    return cap


def load_config(path: Path | None = None) -> Config:
    """Load configuration from tally.conf file."""
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
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value[:1] in ('"', "'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "backend":
                config.backend = value.lower()
            case "supabase_url":
                config.supabase_url = value.rstrip("/")
            case "supabase_anon_key":
                config.supabase_anon_key = value
            case "supabase_service_key":
                config.supabase_service_key = value
            case "local_user":
                config.local_user = value
            case "data_dir":
                config.data_dir = value
            case "timezone":
                config.timezone = value
            case "reset_time":
                config.reset_time = value
            case "weekly_reference_cap":
                config.weekly_reference_cap = _parse_cap(key, value, WEEKLY_REFERENCE_CAP)
            case "monthly_reference_cap":
                config.monthly_reference_cap = _parse_cap(key, value, MONTHLY_REFERENCE_CAP)

    return config
