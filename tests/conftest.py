# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from rtask.config import reset_settings
from rtask.todos.todo_store import TodoStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the CLI bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    db_path = tmp_path / "todos.sqlite3"
    return SimpleNamespace(
        app_name="rtask-test",
        log_level="WARNING",
        log_dir=None,
        database_url=f"sqlite://{db_path}",
        database_path=db_path,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TodoStore:
    """Real SQLite store on a per-test file: its behavior is what we test."""
    return TodoStore(settings.database_path)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """No database/log settings leaking in from the developer's shell."""
    for name in ("RTASK_DATABASE_URL", "DATABASE_URL", "RTASK_LOG_LEVEL", "RTASK_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield monkeypatch
    reset_settings()
