"""Test configuration and fixtures for the Lending Library.

Every test that touches the store gets its own SQLite file under pytest's
``tmp_path``. A file (rather than ``:memory:``) lets concurrent sessions in
one test see the same database.
"""

import copy
import json
import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import logfire
import pytest

from lending_library.config import reset_config
from lending_library.database import DatabaseManager
from lending_library.library import LendingLibrary, make_lending_library

DATA_DIR = Path(__file__).parent / "data"
BOOKS_PATH = DATA_DIR / "books.json"

PATRONS = ["joe", "sue", "ann"]


def load_books() -> list[dict[str, Any]]:
    """The raw book records used throughout the tests."""
    return json.loads(BOOKS_PATH.read_text(encoding="utf-8"))


BOOKS = load_books()


def pytest_configure(config):
    """Keep logfire local during tests."""
    logfire.configure(send_to_logfire=False, console=False)


# === Data Fixtures ===


@pytest.fixture
def books() -> list[dict[str, Any]]:
    """A fresh deep copy of the test books, safe to mutate."""
    return copy.deepcopy(BOOKS)


@pytest.fixture
def book(books) -> dict[str, Any]:
    """A single raw book with one copy."""
    return next(b for b in books if b["nCopies"] == 1)


@pytest.fixture
def patrons() -> list[str]:
    return list(PATRONS)


# === Database Fixtures ===


@pytest.fixture
def test_database_url(tmp_path: Path) -> str:
    """SQLAlchemy async URL of a per-test SQLite file."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test_library.db'}"


@pytest.fixture
async def db(test_database_url: str) -> AsyncGenerator[DatabaseManager, None]:
    """An initialized database, disposed after the test."""
    manager = DatabaseManager(test_database_url, busy_timeout=30.0)
    await manager.init_database()
    try:
        yield manager
    finally:
        await manager.close()


@pytest.fixture
def library(db: DatabaseManager) -> LendingLibrary:
    """An empty library."""
    return make_lending_library(db)


@pytest.fixture
async def loaded_library(library: LendingLibrary, books) -> LendingLibrary:
    """A library holding every test book."""
    for raw in books:
        result = await library.add_book(raw)
        assert result.is_ok, result
    return library


# === Configuration Fixtures ===


@pytest.fixture(autouse=True)
def clean_config(monkeypatch) -> Generator[None, None, None]:
    """Isolate tests from LENDING_LIBRARY_* variables and the cached config."""
    for key in list(os.environ):
        if key.startswith("LENDING_LIBRARY_"):
            monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()
