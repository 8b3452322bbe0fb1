"""
Process settings.

Settings are read from the environment exactly once at startup
(`load_settings`) and passed explicitly to whatever needs them. Nothing
below `main.py` reads `os.environ` directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

REQUIRED_ENV = ("PG_USERNAME", "PG_PASSWORD", "PG_DB_NAME", "PG_DB_HOST")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    pg_username: str
    pg_password: str
    pg_db_name: str
    pg_db_host: str
    pg_db_port: int = 5432
    pg_pool_min_size: int = 1
    pg_pool_max_size: int = 5
    host: str = "0.0.0.0"
    port: int = 9000
    strict_decoding: bool = True
    log_queries: bool = True
    log_level: str = "INFO"


def _env_str(environ: Mapping[str, str], name: str, default: str = "") -> str:
    return (environ.get(name) or "").strip() or default


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = _env_str(environ, name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = _env_str(environ, name).lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build `Settings` from environment variables.

    Raises `ConfigError` naming the first required variable that is missing
    or blank.
    """
    env = os.environ if environ is None else environ

    for name in REQUIRED_ENV:
        if not _env_str(env, name):
            raise ConfigError(f"{name} is not set.")

    min_size = max(_env_int(env, "PG_POOL_MIN_SIZE", 1), 0)
    max_size = max(_env_int(env, "PG_POOL_MAX_SIZE", 5), 1)

    return Settings(
        pg_username=_env_str(env, "PG_USERNAME"),
        pg_password=_env_str(env, "PG_PASSWORD"),
        pg_db_name=_env_str(env, "PG_DB_NAME"),
        pg_db_host=_env_str(env, "PG_DB_HOST"),
        pg_db_port=_env_int(env, "PG_DB_PORT", 5432),
        pg_pool_min_size=min(min_size, max_size),
        pg_pool_max_size=max_size,
        host=_env_str(env, "HOST", "0.0.0.0"),
        port=_env_int(env, "PORT", 9000),
        strict_decoding=_env_bool(env, "STRICT_DECODING", True),
        log_queries=_env_bool(env, "LOG_QUERIES", True),
        log_level=_env_str(env, "LOG_LEVEL", "INFO").upper(),
    )
