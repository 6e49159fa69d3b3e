"""
Checkout ledger: lending and returning copies.

Each (isbn, patron) pair is either checked out or not. Checkouts are refused
when the book is unknown, when every copy is already out, or when the patron
already holds a copy. Returns are refused when the book is unknown or the
patron does not hold a copy. All refusals are BAD_TYPE errors on ``isbn``.
"""

import logging

import logfire

from .database import (
    BookRepository,
    CheckoutRepository,
    DatabaseManager,
    DuplicateError,
    RepositoryException,
)
from .errors import VOID_RESULT, ErrorCode, ErrResult, OkResult, err_result, ok_result
from .models import LendRequest

logger = logging.getLogger(__name__)

circulation_counter = logfire.metric_counter(
    "library.books.circulation", description="Book circulation events (checkout/return)"
)


def _refused(message: str) -> ErrResult:
    return err_result(message, ErrorCode.BAD_TYPE, "isbn")


class CheckoutLedger:
    """The set of live checkouts."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    async def checkout(self, request: LendRequest) -> OkResult[None] | ErrResult:
        """Check out one copy of a book to a patron."""
        isbn, patron_id = request.isbn, request.patron_id
        try:
            async with self._db.session_scope() as session:
                if not await CheckoutRepository(session).create_if_available(isbn, patron_id):
                    # Nothing was inserted: find out why.
                    if await BookRepository(session).get_by_isbn(isbn) is None:
                        return _refused("invalid isbn")
                    logger.warning("No copies of %s left for %s", isbn, patron_id)
                    return _refused("no copies available")
        except DuplicateError:
            logger.warning("Patron %s already has %s checked out", patron_id, isbn)
            return _refused("book already checked out by patron")
        except RepositoryException as e:
            return err_result(str(e), ErrorCode.DB)

        logger.info("Checked out %s to %s", isbn, patron_id)
        circulation_counter.add(1, {"event_type": "checkout"})
        return VOID_RESULT

    async def return_book(self, request: LendRequest) -> OkResult[None] | ErrResult:
        """Return a patron's copy of a book."""
        isbn, patron_id = request.isbn, request.patron_id
        try:
            async with self._db.session_scope() as session:
                if await BookRepository(session).get_by_isbn(isbn) is None:
                    return _refused("invalid isbn")
                if not await CheckoutRepository(session).delete(isbn, patron_id):
                    logger.warning("Patron %s has no checkout of %s to return", patron_id, isbn)
                    return _refused("book not checked out by patron")
        except RepositoryException as e:
            return err_result(str(e), ErrorCode.DB)

        logger.info("Returned %s from %s", isbn, patron_id)
        circulation_counter.add(1, {"event_type": "return"})
        return VOID_RESULT

    async def live_checkouts(self, isbn: str) -> OkResult[int] | ErrResult:
        """Number of copies of ``isbn`` currently checked out."""
        try:
            async with self._db.session_scope() as session:
                return ok_result(await CheckoutRepository(session).count_for_isbn(isbn))
        except RepositoryException as e:
            return err_result(str(e), ErrorCode.DB)

    async def clear(self) -> OkResult[int] | ErrResult:
        """Delete every checkout."""
        try:
            async with self._db.session_scope() as session:
                deleted = await CheckoutRepository(session).delete_all()
        except RepositoryException as e:
            return err_result(str(e), ErrorCode.DB)
        logger.info("Cleared %d checkout(s)", deleted)
        return ok_result(deleted)
