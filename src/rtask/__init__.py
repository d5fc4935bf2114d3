"""rtask: a small SQLite-backed todo tracker for the command line."""

from .todos.todo_models import Category, Todo
from .todos.todo_store import StorageError, TodoStore

__all__ = ["Category", "StorageError", "Todo", "TodoStore"]

__version__ = "0.1.0"
