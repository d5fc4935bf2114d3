# src/rtask/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is read at import time; a missing database URL only fails when
  settings are actually requested (CLI startup).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "RTASK"

_SQLITE_SCHEME = "sqlite:"
_NO_FILE_PATHS = {":memory:", ""}


class ConfigError(RuntimeError):
    """Missing or invalid configuration; fatal at startup."""


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def database_path_from_url(url: str) -> Path:
    """
    Resolve a SQLite connection URL to a file path.

    Accepted forms:
      sqlite://todos.db          -> todos.db (relative)
      sqlite:todos.db            -> todos.db (relative)
      sqlite:///var/lib/todos.db -> /var/lib/todos.db
    Anything after "?" (driver options such as mode=rwc) is ignored.
    """
    raw = (url or "").strip()
    if not raw.lower().startswith(_SQLITE_SCHEME):
        raise ConfigError(f"unsupported database URL {url!r}: expected sqlite:<path>")

    rest = raw[len(_SQLITE_SCHEME):]
    if rest.startswith("//"):
        rest = rest[2:]
    rest = rest.split("?", 1)[0]

    if rest in _NO_FILE_PATHS:
        raise ConfigError(
            f"database URL {url!r} names no file; in-memory databases are not supported"
        )
    return Path(rest).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path | None

    # ---- Storage ----
    database_url: str
    database_path: Path

    @staticmethod
    def from_env() -> Settings:
        load_dotenv(override=False)

        app_name = _env(_k("APP_NAME"), "rtask")
        log_level = _env(_k("LOG_LEVEL"), "WARNING").strip().upper() or "WARNING"
        log_dir = _env_path(_k("LOG_DIR"), None)

        database_url = _first_env(_k("DATABASE_URL"), "DATABASE_URL")
        if database_url is None:
            raise ConfigError(
                f"database URL is not set; export {_k('DATABASE_URL')} or DATABASE_URL "
                "(e.g. sqlite://todos.db)"
            )
        database_url = database_url.strip()

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            database_url=database_url,
            database_path=database_path_from_url(database_url),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def reset_settings() -> None:
    """Forget cached settings (tests, or after changing the environment)."""
    global _SETTINGS
    _SETTINGS = None
