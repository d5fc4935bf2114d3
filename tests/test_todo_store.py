# tests/test_todo_store.py

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path

import pytest

from rtask.todos.todo_models import Todo
from rtask.todos.todo_store import StorageError, TodoStore


def _category_rows(store: TodoStore) -> list[tuple[int, str]]:
    conn = sqlite3.connect(str(store.db_path))
    try:
        return [(int(r[0]), str(r[1])) for r in conn.execute("SELECT id, name FROM categories ORDER BY id")]
    finally:
        conn.close()


def test_end_to_end_add_complete_delete(store: TodoStore) -> None:
    todo = store.add_todo("buy milk", "groceries")
    assert todo == Todo(id=1, description="buy milk", done=False, category_name="groceries")

    assert store.list_todos() == [todo]

    done = store.complete_todo(1)
    assert done is not None
    assert done.done is True
    assert done.category_name == "groceries"

    assert store.delete_done_todos() == 1
    assert store.list_todos() == []


def test_add_without_category_and_empty_description(store: TodoStore) -> None:
    todo = store.add_todo("")
    assert todo.description == ""
    assert todo.category_name is None
    assert todo.done is False
    assert _category_rows(store) == []


def test_list_orders_by_id_and_filters_by_exact_category(store: TodoStore) -> None:
    a = store.add_todo("a", "work")
    b = store.add_todo("b")
    c = store.add_todo("c", "Work")
    d = store.add_todo("d", "work")

    assert [t.id for t in store.list_todos()] == [a.id, b.id, c.id, d.id]
    assert store.list_todos("work") == [a, d]
    assert store.list_todos("Work") == [c]
    assert store.list_todos("wor") == []


def test_list_unknown_category_is_empty(store: TodoStore) -> None:
    store.add_todo("something", "home")
    assert store.list_todos("nope") == []


def test_same_new_category_is_created_once(store: TodoStore) -> None:
    first = store.add_todo("one", "errands")
    second = store.add_todo("two", "errands")

    rows = _category_rows(store)
    assert len(rows) == 1
    assert store.find_category_id_by_name("errands") == rows[0][0]
    assert first.category_name == second.category_name == "errands"


def test_add_reuses_existing_category(store: TodoStore) -> None:
    cat = store.create_category("books")
    assert cat.id > 0
    assert cat.name == "books"

    store.add_todo("read", "books")
    assert _category_rows(store) == [(cat.id, "books")]


def test_create_category_does_not_check_uniqueness(store: TodoStore) -> None:
    a = store.create_category("dup")
    b = store.create_category("dup")
    assert a.id != b.id
    assert store.find_category_id_by_name("dup") == a.id


def test_find_category_id_missing(store: TodoStore) -> None:
    assert store.find_category_id_by_name("missing") is None


def test_complete_is_idempotent(store: TodoStore) -> None:
    todo = store.add_todo("twice")
    first = store.complete_todo(todo.id)
    second = store.complete_todo(todo.id)
    assert first is not None and first.done
    assert second == first


def test_complete_unknown_id_changes_nothing(store: TodoStore) -> None:
    todo = store.add_todo("stay open")
    assert store.complete_todo(todo.id + 100) is None
    assert store.list_todos() == [todo]


def test_delete_done_only_removes_done_todos(store: TodoStore) -> None:
    keep = store.add_todo("keep", "x")
    drop1 = store.add_todo("drop 1", "x")
    drop2 = store.add_todo("drop 2")
    store.complete_todo(drop1.id)
    store.complete_todo(drop2.id)

    assert store.delete_done_todos() == 2
    assert store.delete_done_todos() == 0
    assert store.list_todos() == [keep]
    # categories survive their todos
    assert store.find_category_id_by_name("x") is not None


def test_data_persists_across_store_instances(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "todos.sqlite3"
    TodoStore(db).add_todo("persist me", "p")

    reopened = TodoStore(db)
    assert reopened.count_todos() == 1
    assert reopened.get_todo(1) == Todo(id=1, description="persist me", done=False, category_name="p")
    assert reopened.get_todo(2) is None


def test_ids_are_not_reused_after_delete(store: TodoStore) -> None:
    first = store.add_todo("first")
    store.complete_todo(first.id)
    store.delete_done_todos()
    assert store.add_todo("second").id == first.id + 1


def test_storage_failure_raises_storage_error(tmp_path: Path) -> None:
    # A directory where the database file should be cannot be opened as SQLite.
    db = tmp_path / "not_a_file"
    db.mkdir()
    with pytest.raises(StorageError):
        TodoStore(db)


def test_out_of_range_ids_match_nothing(store: TodoStore) -> None:
    todo = store.add_todo("normal")
    huge = 99999999999999999999
    assert store.complete_todo(huge) is None
    assert store.complete_todo(-huge) is None
    assert store.get_todo(huge) is None
    assert store.list_todos() == [todo]


def test_concurrent_adds_share_one_new_category(tmp_path: Path) -> None:
    db = tmp_path / "shared.sqlite3"
    TodoStore(db)
    errors: list[BaseException] = []
    added: list[Todo] = []

    def worker(n: int) -> None:
        try:
            added.append(TodoStore(db).add_todo(f"job {n}", "shared"))
        except BaseException as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert errors == []
    assert len(added) == 16
    store = TodoStore(db)
    assert len(_category_rows(store)) == 1
    assert len(store.list_todos("shared")) == 16
