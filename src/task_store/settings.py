from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """
    Settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - LOG_LEVEL: logging level name for the task_store logger. Default 'INFO'
    """

    persistence_backend: str = "memory"
    sqlite_db_path: str = "./data/tasks.db"
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def parse_log_level(value: str) -> str:
    name = value.strip().upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    return "INFO"


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        log_level=parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
