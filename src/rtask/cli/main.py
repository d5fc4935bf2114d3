# src/rtask/cli/main.py

"""
CLI entrypoint.

Parses arguments, loads settings, initializes logging, opens the store and
dispatches to the registered command. User-facing output goes to stdout,
logs and errors to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .. import __version__
from ..cli.bootstrap import create_store
from ..cli.commands import CommandRegistry, registry
from ..config import ConfigError, get_settings
from ..logging_setup import setup_logging
from ..todos.todo_store import StorageError

logger = logging.getLogger(__name__)


def build_parser(commands: CommandRegistry = registry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rtask",
        description="Track todos in a local SQLite database (set DATABASE_URL, e.g. sqlite://todos.db).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands.add_subparsers(parser)
    return parser


def _emit(line: str) -> None:
    print(line, flush=True)


def _fail(message: str) -> int:
    print(f"error: {message}", file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ConfigError as exc:
        return _fail(str(exc))

    console_level = getattr(logging, settings.log_level, logging.WARNING)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)
    logger.info("Starting %s (command=%s)", settings.app_name, args.command or "list")

    store = None
    try:
        store = create_store(settings=settings)
        return registry.handle(store, args, _emit)
    except StorageError as exc:
        logger.debug("Storage failure", exc_info=True)
        return _fail(str(exc))
    finally:
        if store is not None:
            store.close()


if __name__ == "__main__":
    raise SystemExit(main())
