"""Configuration loading for the billing tool.

Loads settings from .env file and environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_STORAGE_KEY = "autofee_database"


@dataclass
class AppConfig:
    """Runtime configuration for the API server and CLI."""

    storage_dir: str = "./data"
    """Directory backing the local key/value storage"""

    storage_key: str = DEFAULT_STORAGE_KEY
    """Key under which the serialized database is stored"""

    log_file: str = "logs/server.log"
    """Path to log file"""

    log_level: str = "INFO"
    """Level name; unknown names log at INFO"""

    locale: str = "ko_KR"
    """Locale for currency and number formatting"""

    host: str = "0.0.0.0"
    port: int = 8000


def load_config() -> AppConfig:
    """
    Load configuration from .env file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (AUTOFEE_STORAGE_DIR, AUTOFEE_STORAGE_KEY, LOG_FILE, ...)
    2. .env file in project root
    3. Default values

    Returns:
        AppConfig with all settings

    Raises:
        ValueError: If PORT is not a valid TCP port number
    """
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    port_str = os.getenv("PORT", "8000")
    try:
        port = int(port_str)
    except ValueError as e:
        raise ValueError(f"PORT must be an integer, got {port_str!r}") from e
    if not 0 < port < 65536:
        raise ValueError(f"PORT must be between 1 and 65535, got {port}")

    storage_key = os.getenv("AUTOFEE_STORAGE_KEY", DEFAULT_STORAGE_KEY).strip()
    if not storage_key:
        raise ValueError("AUTOFEE_STORAGE_KEY must not be empty")

    return AppConfig(
        storage_dir=os.getenv("AUTOFEE_STORAGE_DIR", "./data"),
        storage_key=storage_key,
        log_file=os.getenv("LOG_FILE", "logs/server.log"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        locale=os.getenv("LOCALE", "ko_KR"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
    )
