"""
The lending library: one operation per command.

Every operation validates the raw request first. An invalid request is
answered with its validation errors and never reaches the catalog or the
ledger. A valid request is handed to the catalog or ledger, whose result is
returned unchanged.

Commands and their results:

- addBook -> add_book: the stored Book
- findBooks -> find_books: list of Books
- checkoutBook -> checkout_book: None
- returnBook -> return_book: None
- clear -> clear: None
- loadPaths -> load_paths: None
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .catalog import BookCatalog
from .database import DatabaseManager
from .errors import VOID_RESULT, ErrResult, OkResult
from .ledger import CheckoutLedger
from .loader import read_books
from .models import Book
from .observability import trace_command
from .validation import validate

logger = logging.getLogger(__name__)


class LendingLibrary:
    """Validates requests and dispatches them to the catalog or ledger."""

    def __init__(self, db: DatabaseManager):
        self.catalog = BookCatalog(db)
        self.ledger = CheckoutLedger(db)

    @trace_command("addBook")
    async def add_book(self, raw: Any) -> OkResult[Book] | ErrResult:
        """Add a book, merging copies into an identical existing book."""
        request = validate("addBook", raw)
        if isinstance(request, ErrResult):
            return request
        return await self.catalog.add_book(request.val)

    @trace_command("findBooks")
    async def find_books(self, raw: Any) -> OkResult[list[Book]] | ErrResult:
        """Search titles and authors; results sorted by title and paginated."""
        request = validate("findBooks", raw)
        if isinstance(request, ErrResult):
            return request
        return await self.catalog.find_books(request.val)

    @trace_command("checkoutBook")
    async def checkout_book(self, raw: Any) -> OkResult[None] | ErrResult:
        """Check out a copy of a book to a patron."""
        request = validate("checkoutBook", raw)
        if isinstance(request, ErrResult):
            return request
        return await self.ledger.checkout(request.val)

    @trace_command("returnBook")
    async def return_book(self, raw: Any) -> OkResult[None] | ErrResult:
        """Return a patron's copy of a book."""
        request = validate("returnBook", raw)
        if isinstance(request, ErrResult):
            return request
        return await self.ledger.return_book(request.val)

    @trace_command("clear")
    async def clear(self) -> OkResult[None] | ErrResult:
        """Drop all books and checkouts."""
        for step in (self.ledger.clear, self.catalog.clear):
            result = await step()
            if isinstance(result, ErrResult):
                return result
        return VOID_RESULT

    @trace_command("loadPaths")
    async def load_paths(self, paths: Iterable[str | Path]) -> OkResult[None] | ErrResult:
        """
        Add every book from each JSON file in ``paths``.

        Stops at the first file that cannot be read or the first book that
        cannot be added, and returns that failure.
        """
        for path in paths:
            books = read_books(path)
            if isinstance(books, ErrResult):
                return books
            for raw in books.val:
                result = await self.add_book(raw)
                if isinstance(result, ErrResult):
                    return result
            logger.info("Loaded %d book(s) from %s", len(books.val), path)
        return VOID_RESULT


def make_lending_library(db: DatabaseManager) -> LendingLibrary:
    """Build a library on an initialized database."""
    return LendingLibrary(db)
