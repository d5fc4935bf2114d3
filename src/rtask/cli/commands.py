# src/rtask/cli/commands.py

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ..todos.todo_store import SQLITE_INT_MAX, SQLITE_INT_MIN, TodoStore

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[TodoStore, argparse.Namespace, CommandEmitter], int]
ParserConfigurer = Callable[[argparse.ArgumentParser], None]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Command:
    name: str
    handler: CommandHandler
    help_text: str
    configure: ParserConfigurer | None = None
    aliases: list[str] = field(default_factory=list)


class CommandRegistry:
    """Subcommand registry: feeds argparse and routes parsed args to handlers."""

    def __init__(self, default: str | None = None) -> None:
        self._commands: dict[str, Command] = {}
        self._handlers: dict[str, CommandHandler] = {}
        self._default = default

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        configure: ParserConfigurer | None = None,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._commands[key] = Command(key, handler, help_text, configure, list(aliases))
        self._handlers[key] = handler
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def add_subparsers(self, parser: argparse.ArgumentParser) -> None:
        sub = parser.add_subparsers(dest="command", metavar="COMMAND")
        for cmd in self._commands.values():
            p = sub.add_parser(cmd.name, help=cmd.help_text, aliases=cmd.aliases)
            if cmd.configure is not None:
                cmd.configure(p)

    def handle(self, store: TodoStore, args: argparse.Namespace, emit: CommandEmitter) -> int:
        """
        Run the handler for args.command (or the default command when none was
        given). Returns the process exit status.
        """
        name = getattr(args, "command", None) or self._default
        if not name:
            emit("No command given. Use --help to list available commands.")
            return 2

        handler = self._handlers.get(name.lower())
        if handler is None:
            emit(f"Unknown command: {name}. Use --help to list available commands.")
            return 2

        logger.debug("Dispatching command %s", name)
        return handler(store, args, emit)


registry = CommandRegistry(default="list")


def _optional_category(raw: str | None) -> str | None:
    # An empty category on the command line means "no category".
    return raw if raw else None


def cmd_add(store: TodoStore, args: argparse.Namespace, emit: CommandEmitter) -> int:
    description = args.description
    emit(f"Adding new todo with description '{description}'")
    todo = store.add_todo(description, _optional_category(getattr(args, "category", "")))
    emit(f"Added new todo: {todo}")
    return 0


def cmd_done(store: TodoStore, args: argparse.Namespace, emit: CommandEmitter) -> int:
    todo_id = args.id
    emit(f"Marking todo {todo_id} as done")
    todo = store.complete_todo(todo_id)
    if todo is None:
        emit(f"Invalid id {todo_id}")
    else:
        emit(f"Todo marked as done: {todo}")
    return 0


def cmd_delete_done(store: TodoStore, args: argparse.Namespace, emit: CommandEmitter) -> int:
    emit("Deleting all done todos")
    deleted = store.delete_done_todos()
    emit(f"Deleted {deleted} todos that were marked as done")
    return 0


def cmd_list(store: TodoStore, args: argparse.Namespace, emit: CommandEmitter) -> int:
    """
    list            -> every todo
    list <category> -> only todos in that category
    (no command)    -> same as plain list
    """
    if getattr(args, "command", None) is None:
        emit("Printing list of all todos")
        category = None
    else:
        raw = getattr(args, "category", "")
        emit(f"Printing list of all todos in category '{raw}'")
        category = _optional_category(raw)

    for todo in store.list_todos(category):
        emit(str(todo))
    return 0


def _configure_add(p: argparse.ArgumentParser) -> None:
    p.add_argument("description", help="What needs doing.")
    p.add_argument("category", nargs="?", default="", help="Category name (created if new).")


def _todo_id(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid todo id: {raw!r}") from None
    if not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
        raise argparse.ArgumentTypeError(f"todo id out of range: {raw}")
    return value


def _configure_done(p: argparse.ArgumentParser) -> None:
    p.add_argument("id", type=_todo_id, help="Id of the todo to mark as done.")


def _configure_list(p: argparse.ArgumentParser) -> None:
    p.add_argument("category", nargs="?", default="", help="Only show todos in this category.")


registry.register("add", cmd_add, help_text="Add a new todo.", configure=_configure_add)
registry.register("done", cmd_done, help_text="Mark a todo as done.", configure=_configure_done)
registry.register("delete-done", cmd_delete_done, help_text="Delete all todos marked as done.")
registry.register(
    "list",
    cmd_list,
    help_text="List todos, optionally only one category.",
    configure=_configure_list,
    aliases=["ls"],
)
