"""
Application Settings

Loads process-wide configuration from the environment (and a .env file)
once at startup.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "email_reminder.db"
DEFAULT_LOG_FILE = PROJECT_ROOT / "logs" / "email_reminder.log"
DEFAULT_SESSION_SECRET = "change_this"


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of the runtime configuration."""

    aes_secret_key: str
    database_url: str = f"sqlite:///{DEFAULT_DB_PATH}"
    session_secret: str = DEFAULT_SESSION_SECRET
    host: str = "0.0.0.0"
    port: int = 3000
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_timeout: int = 30
    dispatch_interval_seconds: int = 60
    dispatcher_enabled: bool = True
    reminder_timezone: str = "UTC"
    log_level: str = "INFO"
    log_file: str = str(DEFAULT_LOG_FILE)


def load_settings():
    """
    Build a Settings instance from environment variables.

    Returns:
        Settings: configuration for this process

    Raises:
        RuntimeError: If AES_SECRET_KEY is not set
    """
    load_dotenv()

    aes_secret_key = os.getenv("AES_SECRET_KEY", "")
    if not aes_secret_key:
        raise RuntimeError("AES_SECRET_KEY not set in environment or .env")

    session_secret = os.getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET)
    if session_secret == DEFAULT_SESSION_SECRET:
        logger.warning("SESSION_SECRET not set, using the insecure default")

    return Settings(
        aes_secret_key=aes_secret_key,
        database_url=os.getenv("DATABASE_URL", f"sqlite:///{DEFAULT_DB_PATH}"),
        session_secret=session_secret,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        smtp_server=os.getenv("SMTP_SERVER", "smtp.gmail.com"),
        smtp_port=int(os.getenv("SMTP_PORT", "587")),
        smtp_timeout=int(os.getenv("SMTP_TIMEOUT", "30")),
        dispatch_interval_seconds=int(os.getenv("DISPATCH_INTERVAL_SECONDS", "60")),
        dispatcher_enabled=_env_bool("DISPATCHER_ENABLED", True),
        reminder_timezone=os.getenv("REMINDER_TIMEZONE", "UTC"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE", str(DEFAULT_LOG_FILE)),
    )
