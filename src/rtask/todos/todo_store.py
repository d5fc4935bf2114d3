# src/rtask/todos/todo_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from .todo_models import Category, Todo

logger = logging.getLogger(__name__)

# SQLite INTEGER is a signed 64-bit value.
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1

_TODO_SELECT = """
    SELECT todos.id, todos.description, todos.done, categories.name AS category_name
    FROM todos
    LEFT JOIN categories ON todos.category_id = categories.id
"""


def _fits_sqlite_int(value: int) -> bool:
    return SQLITE_INT_MIN <= int(value) <= SQLITE_INT_MAX


class StorageError(RuntimeError):
    """Any failure of the underlying SQLite database (open, I/O, constraints)."""


class TodoStore:
    """
    SQLite todo store.

    The schema is created on first use (CREATE TABLE IF NOT EXISTS); there are
    no migrations.

    Thread-safety:
    - each method opens its own SQLite connection
    - category find-or-create runs under BEGIN IMMEDIATE, so two writers on the
      same file cannot both insert the same new category name
    """

    def __init__(self, db_path: str | Path = "todos.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_todos()
        except StorageError:
            total = -1
        logger.info("TodoStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            self._configure_conn(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        conn.execute("PRAGMA foreign_keys=ON")
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """
        Short-lived connection: commit on success, rollback + StorageError on
        any sqlite3.Error, always close.
        """
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StorageError(f"cannot open database {self._db_path}: {exc}") from exc

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            with contextlib.suppress(sqlite3.Error):
                conn.rollback()
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS todos (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    description TEXT NOT NULL,
                    done BOOLEAN NOT NULL DEFAULT FALSE,
                    category_id INTEGER NULL REFERENCES categories(id)
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_categories_name ON categories(name)")

    @staticmethod
    def _row_to_todo(row: sqlite3.Row) -> Todo:
        return Todo(
            id=int(row["id"]),
            description=str(row["description"]),
            done=bool(row["done"]),
            category_name=row["category_name"],
        )

    @staticmethod
    def _select_category_id(cur: sqlite3.Cursor, name: str) -> int | None:
        cur.execute("SELECT id FROM categories WHERE name = ? ORDER BY id LIMIT 1", (name,))
        row = cur.fetchone()
        return int(row["id"]) if row else None

    @staticmethod
    def _insert_category(cur: sqlite3.Cursor, name: str) -> int:
        cur.execute("INSERT INTO categories(name) VALUES (?)", (name,))
        rowid = cur.lastrowid
        if rowid is None:
            raise StorageError("SQLite did not return lastrowid for categories insert")
        logger.info("Category created id=%s name=%r", rowid, name)
        return int(rowid)

    def _select_todo(self, cur: sqlite3.Cursor, todo_id: int) -> Todo | None:
        if not _fits_sqlite_int(todo_id):
            return None
        cur.execute(_TODO_SELECT + " WHERE todos.id = ?", (int(todo_id),))
        row = cur.fetchone()
        return self._row_to_todo(row) if row else None

    # ---- public API: categories ----

    def create_category(self, name: str) -> Category:
        """Insert a category row. No uniqueness check is made here."""
        with self._connect() as conn:
            category_id = self._insert_category(conn.cursor(), name)
        return Category(id=category_id, name=name)

    def find_category_id_by_name(self, name: str) -> int | None:
        with self._connect() as conn:
            return self._select_category_id(conn.cursor(), name)

    # ---- public API: todos ----

    def count_todos(self) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM todos")
            (n,) = cur.fetchone()
            return int(n)

    def get_todo(self, todo_id: int) -> Todo | None:
        with self._connect() as conn:
            return self._select_todo(conn.cursor(), todo_id)

    def add_todo(self, description: str, category: str | None = None) -> Todo:
        """
        Insert a new (not done) todo and return it with its category name.

        When category is given, the category is looked up by exact name and
        created if absent; lookup, creation and the todo insert share one
        write transaction.
        """
        with self._connect() as conn:
            cur = conn.cursor()

            category_id: int | None = None
            if category is not None:
                cur.execute("BEGIN IMMEDIATE")
                category_id = self._select_category_id(cur, category)
                if category_id is None:
                    category_id = self._insert_category(cur, category)

            cur.execute(
                "INSERT INTO todos(description, category_id) VALUES (?, ?)",
                (description, category_id),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for todos insert")

            todo = self._select_todo(cur, int(rowid))
            if todo is None:
                raise StorageError(f"todo id={rowid} vanished right after insert")

        logger.debug("Todo added id=%s category_id=%s", todo.id, category_id)
        return todo

    def complete_todo(self, todo_id: int) -> Todo | None:
        """
        Mark a todo as done.

        Returns the updated todo, or None when no todo has this id. Calling it
        again on a done todo returns the todo unchanged.
        """
        if not _fits_sqlite_int(todo_id):
            logger.debug("complete_todo: id=%s is out of range", todo_id)
            return None

        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("UPDATE todos SET done = TRUE WHERE id = ?", (int(todo_id),))
            if cur.rowcount < 1:
                logger.debug("complete_todo: no todo with id=%s", todo_id)
                return None
            todo = self._select_todo(cur, todo_id)

        logger.debug("Todo completed id=%s", todo_id)
        return todo

    def list_todos(self, category: str | None = None) -> list[Todo]:
        """
        All todos ordered by id, or only those whose category name equals
        `category` exactly. An unknown category gives an empty list.
        """
        with self._connect() as conn:
            cur = conn.cursor()
            if category is None:
                cur.execute(_TODO_SELECT + " ORDER BY todos.id")
            else:
                cur.execute(
                    _TODO_SELECT + " WHERE categories.name = ? ORDER BY todos.id",
                    (category,),
                )
            return [self._row_to_todo(r) for r in cur.fetchall()]

    def delete_done_todos(self) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM todos WHERE done = TRUE")
            deleted = max(0, int(cur.rowcount))

        logger.debug("Deleted %s done todos", deleted)
        return deleted
