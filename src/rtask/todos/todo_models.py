# src/rtask/todos/todo_models.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Category:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Todo:
    """
    A todo as read back from the store.

    category_name is the joined categories.name (None for uncategorized todos).
    """

    id: int
    description: str
    done: bool
    category_name: str | None = None

    def __str__(self) -> str:
        mark = "x" if self.done else " "
        suffix = f" (category: {self.category_name})" if self.category_name is not None else ""
        return f"- [{mark}] {self.id}: {self.description}{suffix}"
