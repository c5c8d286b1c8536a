"""
Configuration helpers for the boxoffice backend.

Exposes a frozen Settings object read from environment variables (storage
paths, reset token lifetime, SMTP, log level) so that stores/routers do not
fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    users_file: Path
    events_file: Path
    password_reset_ttl: int
    public_base_url: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    data_dir = Path(os.getenv("DATA_DIR", "data"))
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=data_dir,
        users_file=Path(os.getenv("USERS_FILE") or data_dir / "users.json"),
        events_file=Path(os.getenv("EVENTS_FILE") or data_dir / "events.json"),
        password_reset_ttl=_int(os.getenv("PASSWORD_RESET_TTL", "3600"), 3600),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/"),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
