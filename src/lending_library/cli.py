"""
Command-line entry point for the Lending Library.

Usage:
    lending-library DB_URL CMD [KEY=VALUE ...]

    CMD is one of addBook, clear, checkoutBook, findBooks, loadPaths,
    returnBook.

Values made only of digits become integers, ``[a, b]`` becomes a list of
strings, and anything else stays a string:

    lending-library sqlite+aiosqlite:///library.db addBook isbn=123-456-789-0 \\
        title=Dune "authors=[Frank Herbert]" pages=412 year=1965 publisher=Chilton
    lending-library sqlite+aiosqlite:///library.db loadPaths a=books1.json b=books2.json

Success values are printed to stdout as JSON. Errors are printed to stderr,
one per line, and the exit status is 1.
"""

import argparse
import asyncio
import json
import logging
import re
import sys
from typing import Any

from pydantic import BaseModel

from .config import get_config
from .database import DatabaseManager, RepositoryException
from .errors import ErrorCode, ErrResult, OkResult, err_result
from .library import LendingLibrary
from .observability import configure_observability

logger = logging.getLogger(__name__)

COMMANDS = ("addBook", "checkoutBook", "clear", "findBooks", "loadPaths", "returnBook")

_KEY_VALUE = re.compile(r"^(\w+)=(.*)$", re.DOTALL)
_LIST_VALUE = re.compile(r"^\[(.+)\]$", re.DOTALL)


def make_request(args: list[str]) -> OkResult[dict[str, Any]] | ErrResult:
    """Turn ``key=value`` arguments into a raw request mapping."""
    request: dict[str, Any] = {}
    for arg in args:
        m = _KEY_VALUE.match(arg)
        if m is None:
            return err_result(f'arg {arg} not of form "key=value"', ErrorCode.BAD_ARG)
        key, value = m.groups()
        if value.isascii() and value.isdigit():
            request[key] = int(value)
        elif (list_match := _LIST_VALUE.match(value)) is not None:
            request[key] = re.split(r"\s*,\s*", list_match.group(1).strip())
        else:
            request[key] = value
    return OkResult(val=request)


def format_errors(result: ErrResult) -> list[str]:
    """One ``CODE: message; path=...`` line per error."""
    return [str(err) for err in result.errors]


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


async def run_command(library: LendingLibrary, command: str, request: dict[str, Any]):
    """Dispatch one command to the library."""
    if command == "addBook":
        return await library.add_book(request)
    if command == "checkoutBook":
        return await library.checkout_book(request)
    if command == "clear":
        return await library.clear()
    if command == "findBooks":
        return await library.find_books(request)
    if command == "loadPaths":
        return await library.load_paths(request.values())
    if command == "returnBook":
        return await library.return_book(request)
    return err_result(f"unknown command {command}", ErrorCode.BAD_ARG)


async def _go(database_url: str, command: str, request: dict[str, Any]) -> OkResult[Any] | ErrResult:
    config = get_config()
    db = DatabaseManager(database_url, busy_timeout=config.busy_timeout, echo=config.echo_sql)
    try:
        await db.init_database()
        return await run_command(LendingLibrary(db), command, request)
    except RepositoryException as e:
        return err_result(str(e), ErrorCode.DB)
    finally:
        await db.close()


def output(result: OkResult[Any] | ErrResult) -> int:
    """Print a result and return the process exit status."""
    if isinstance(result, ErrResult):
        for line in format_errors(result):
            print(line, file=sys.stderr)
        return 1
    if result.val is not None:
        print(json.dumps(_to_jsonable(result.val), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="lending-library",
        description="Manage a lending library's catalog and checkouts",
    )
    parser.add_argument("database_url", help="SQLAlchemy async database URL")
    parser.add_argument("command", choices=COMMANDS, help="Library command to run")
    parser.add_argument("args", nargs="*", metavar="KEY=VALUE", help="Request fields")
    args = parser.parse_args(argv)

    config = get_config()
    logging.basicConfig(
        level=config.effective_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    configure_observability(config)

    request = make_request(args.args)
    if isinstance(request, ErrResult):
        return output(request)

    logger.debug("Running %s against %s", args.command, args.database_url)
    return output(asyncio.run(_go(args.database_url, args.command, request.val)))


if __name__ == "__main__":
    sys.exit(main())
