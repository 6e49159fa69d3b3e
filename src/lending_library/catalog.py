"""
Book catalog: adding, merging and searching books.

Adding a book whose isbn is already known never replaces the stored record.
If every field other than the copy count matches, the copies are added to the
stored count. If anything else differs, the add is rejected: two different
books cannot share an isbn.
"""

import logging

from .database import BookRepository, DatabaseManager, DuplicateError, RepositoryException
from .database.text_search import to_match_expression
from .errors import ErrorCode, ErrResult, OkResult, err_result, ok_result
from .models import MAX_STORED_INT, AddBookRequest, Book, FindBooksRequest

logger = logging.getLogger(__name__)


class BookCatalog:
    """The set of known titles, keyed by isbn."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    async def add_book(self, request: AddBookRequest) -> OkResult[Book] | ErrResult:
        """
        Add a book, or merge its copies into an identical stored book.

        Returns:
            The inserted or updated book; a BAD_TYPE error on ``isbn`` when
            the isbn belongs to a different book; a DB error on store failure
        """
        book = request.to_book()
        try:
            try:
                return await self._add_or_merge(book)
            except DuplicateError:
                # Lost a race with a concurrent insert of the same isbn; merge instead.
                logger.debug("Concurrent insert of %s; retrying as a merge", book.isbn)
                return await self._add_or_merge(book)
        except RepositoryException as e:
            return err_result(str(e), ErrorCode.DB)

    async def _add_or_merge(self, book: Book) -> OkResult[Book] | ErrResult:
        async with self._db.session_scope() as session:
            repo = BookRepository(session)
            stored = await repo.get_by_isbn(book.isbn)

            if stored is None:
                created = await repo.create(book)
                logger.info("Added book %s with %d copies", created.isbn, created.n_copies)
                return ok_result(created)

            if not stored.same_edition(book):
                logger.warning("Rejected book %s: data differs from stored book", book.isbn)
                return err_result("Invalid book/data mismatch", ErrorCode.BAD_TYPE, "isbn")

            merged = await repo.add_copies(book.isbn, book.n_copies)
            if merged is None:
                # The book was read in this transaction, so only the overflow guard can miss.
                logger.warning("Rejected merge into %s: copy count overflow", book.isbn)
                return err_result(
                    f"nCopies would exceed {MAX_STORED_INT} copies", ErrorCode.BAD_TYPE, "nCopies"
                )
            logger.info("Merged %d copies into book %s", book.n_copies, merged.isbn)
            return ok_result(merged)

    async def find_books(self, request: FindBooksRequest) -> OkResult[list[Book]] | ErrResult:
        """
        Find books whose title or authors match the search words.

        Results are sorted by title; ``index`` skips leading matches and
        ``count`` caps the number returned. No match is an empty list.
        """
        search = " ".join(request.search.split())
        expression = to_match_expression(search)
        if expression is None:
            return ok_result([])

        try:
            async with self._db.session_scope() as session:
                books = await BookRepository(session).search(
                    expression, offset=request.index, limit=request.count
                )
        except RepositoryException as e:
            return err_result(str(e), ErrorCode.DB)

        logger.debug("Search %r matched %d book(s)", search, len(books))
        return ok_result(books)

    async def clear(self) -> OkResult[int] | ErrResult:
        """Delete every book. Checkouts must already be gone."""
        try:
            async with self._db.session_scope() as session:
                deleted = await BookRepository(session).delete_all()
        except RepositoryException as e:
            return err_result(str(e), ErrorCode.DB)
        logger.info("Cleared %d book(s)", deleted)
        return ok_result(deleted)
