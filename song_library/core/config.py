# song_library/core/config.py
"""
Process-wide settings, read once from the environment at startup.
A .env file in the working directory is loaded first if present.
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

from dotenv import load_dotenv

from song_library.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_APP_PORT = 8080
DEFAULT_EXTERNAL_API_TIMEOUT = 20.0

REQUIRED_DB_KEYS = (
    "POSTGRES_HOST",
    "POSTGRES_PORT",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "POSTGRES_DB",
)


@dataclass(frozen=True)
class Settings:
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str
    app_host: str = "0.0.0.0"
    app_port: int = DEFAULT_APP_PORT
    external_api_url: str = ""
    external_api_timeout: float = DEFAULT_EXTERNAL_API_TIMEOUT
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    log_level: str = "info"

    @property
    def dsn(self) -> str:
        user = quote(self.db_user, safe="")
        password = quote(self.db_password, safe="")
        return f"postgresql://{user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}?sslmode=disable"


def _to_int(env: Mapping[str, str], key: str, default: Optional[int] = None) -> int:
    raw = env.get(key, "")
    if raw == "":
        if default is None:
            raise ConfigError(f"{key} is not set")
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")


def _to_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key, "")
    if raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env: Mapping to read instead of os.environ (no .env loading then).

    Raises:
        ConfigError: a required database key is missing or a number is malformed.
    """
    if env is None:
        if not load_dotenv():
            logger.warning("No .env file found")
        env = os.environ

    missing = [key for key in REQUIRED_DB_KEYS if not env.get(key)]
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")

    external_api_url = env.get("EXTERNAL_API_URL", "").rstrip("/")
    if not external_api_url:
        logger.warning("EXTERNAL_API_URL not set. Song creation will fail until it is configured.")

    return Settings(
        db_host=env["POSTGRES_HOST"],
        db_port=_to_int(env, "POSTGRES_PORT"),
        db_user=env["POSTGRES_USER"],
        db_password=env["POSTGRES_PASSWORD"],
        db_name=env["POSTGRES_DB"],
        app_host=env.get("APP_HOST") or "0.0.0.0",
        app_port=_to_int(env, "APP_PORT", DEFAULT_APP_PORT),
        external_api_url=external_api_url,
        external_api_timeout=_to_float(env, "EXTERNAL_API_TIMEOUT", DEFAULT_EXTERNAL_API_TIMEOUT),
        db_pool_min_size=_to_int(env, "DB_POOL_MIN_SIZE", 1),
        db_pool_max_size=_to_int(env, "DB_POOL_MAX_SIZE", 10),
        log_level=(env.get("LOG_LEVEL") or "info").lower(),
    )
