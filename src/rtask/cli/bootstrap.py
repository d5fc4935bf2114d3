# src/rtask/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root": it turns settings into the TodoStore
handle that every command receives explicitly.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..todos.todo_store import TodoStore

logger = logging.getLogger(__name__)


def create_store(*, settings: Settings | None = None) -> TodoStore:
    """
    Open (and if needed initialize) the store named by the settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    logger.debug("Opening todo store at %s (url=%s)", settings.database_path, settings.database_url)
    return TodoStore(settings.database_path)
