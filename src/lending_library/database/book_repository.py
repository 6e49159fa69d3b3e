"""
Book repository for the Lending Library.

Provides the catalog's persistence primitives:

1. **Lookup**: fetch a book by isbn
2. **Insert**: add a new catalog record
3. **Increment**: add copies to an existing record, returning the updated row
4. **Search**: full-text match over title and authors, sorted by title,
   with skip and limit

All methods return ``Book`` pydantic models, never ORM objects.
"""

import logging

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import MAX_STORED_INT
from ..models import Book as BookModel
from .repository import DuplicateError, safe_query, to_book_model
from .schema import Book as BookDB

logger = logging.getLogger(__name__)

_BOOKS = BookDB.__table__

_FTS_MATCH = text(
    "books.rowid IN (SELECT rowid FROM books_fts WHERE books_fts MATCH :match_expression)"
)


class BookRepository:
    """Data access for the ``books`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_isbn(self, isbn: str) -> BookModel | None:
        """Get a book by isbn, or None when the library has no such book."""
        query = select(BookDB).where(BookDB.isbn == isbn)
        result = await safe_query(
            lambda: self.session.execute(query), "Failed to get book by ISBN"
        )
        book = result.scalar_one_or_none()
        return None if book is None else to_book_model(book)

    async def create(self, book: BookModel) -> BookModel:
        """
        Insert a new book.

        Raises:
            DuplicateError: If a book with the same isbn already exists
            RepositoryException: On other database errors
        """
        db_book = BookDB(
            isbn=book.isbn,
            title=book.title,
            authors=list(book.authors),
            pages=book.pages,
            year=book.year,
            publisher=book.publisher,
            n_copies=book.n_copies,
        )
        self.session.add(db_book)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateError(f"Book with ISBN {book.isbn} already exists") from e

        logger.debug("Inserted book %s", book.isbn)
        return to_book_model(db_book)

    async def add_copies(self, isbn: str, n_copies: int) -> BookModel | None:
        """
        Atomically add ``n_copies`` to a book's copy count.

        The increment happens in the database, so concurrent increments are
        never lost.

        Returns:
            The book after the update, or None if the isbn is unknown or
            the new count would not fit in the column
        """
        stmt = (
            update(_BOOKS)
            .where(_BOOKS.c.isbn == isbn, _BOOKS.c.n_copies <= MAX_STORED_INT - n_copies)
            .values(n_copies=_BOOKS.c.n_copies + n_copies, updated_at=func.now())
            .returning(*_BOOKS.c)
        )
        result = await safe_query(lambda: self.session.execute(stmt), "Failed to add copies")
        row = result.one_or_none()
        if row is None:
            return None

        logger.debug("Book %s now has %d copies", isbn, row.n_copies)
        return to_book_model(row)

    async def search(
        self, match_expression: str, offset: int = 0, limit: int | None = None
    ) -> list[BookModel]:
        """
        Full-text search over title and authors.

        Args:
            match_expression: FTS5 MATCH expression (see ``text_search``)
            offset: Number of leading matches to skip
            limit: Maximum number of matches to return; None for all

        Returns:
            Matching books sorted by title
        """
        query = (
            select(BookDB)
            .where(_FTS_MATCH.bindparams(match_expression=match_expression))
            .order_by(BookDB.title.asc())
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await safe_query(lambda: self.session.execute(query), "Failed to search books")
        return [to_book_model(book) for book in result.scalars().all()]

    async def delete_all(self) -> int:
        """Delete every book. Returns the number of rows removed."""
        result = await safe_query(
            lambda: self.session.execute(delete(_BOOKS)), "Failed to delete books"
        )
        return result.rowcount
