"""
Checkout repository for the Lending Library.

A live checkout is a row in ``checkouts``; returning a book deletes the row.
The capacity rule (live checkouts per isbn never exceed the book's
``n_copies``) is enforced by ``create_if_available``, which checks and
inserts in a single INSERT ... SELECT statement so that two concurrent
checkouts of the last copy cannot both succeed.
"""

import logging

from sqlalchemy import and_, delete, func, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .repository import DuplicateError, safe_query
from .schema import Book as BookDB
from .schema import Checkout as CheckoutDB

logger = logging.getLogger(__name__)

_BOOKS = BookDB.__table__
_CHECKOUTS = CheckoutDB.__table__


class CheckoutRepository:
    """Data access for the ``checkouts`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_for_isbn(self, isbn: str) -> int:
        """Number of live checkouts of a book."""
        query = select(func.count()).select_from(_CHECKOUTS).where(_CHECKOUTS.c.isbn == isbn)
        result = await safe_query(
            lambda: self.session.execute(query), "Failed to count checkouts"
        )
        return result.scalar_one()

    async def create_if_available(self, isbn: str, patron_id: str) -> bool:
        """
        Check out a copy of ``isbn`` to ``patron_id`` if one is free.

        The row is inserted only when the book exists and its live checkout
        count is below its copy count.

        Returns:
            True if the checkout was created, False if the book does not
            exist or every copy is already out

        Raises:
            DuplicateError: If the patron already has this book checked out
        """
        live_count = (
            select(func.count())
            .select_from(_CHECKOUTS)
            .where(_CHECKOUTS.c.isbn == isbn)
            .correlate(None)
            .scalar_subquery()
        )
        source = select(literal(isbn), literal(patron_id)).where(
            and_(_BOOKS.c.isbn == isbn, _BOOKS.c.n_copies > live_count)
        )
        stmt = insert(_CHECKOUTS).from_select(["isbn", "patron_id"], source)

        try:
            result = await self.session.execute(stmt)
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateError(f"Book {isbn} already checked out by {patron_id}") from e

        created = result.rowcount == 1
        logger.debug("Checkout of %s by %s: %s", isbn, patron_id, "created" if created else "refused")
        return created

    async def delete(self, isbn: str, patron_id: str) -> bool:
        """
        Remove the live checkout of ``isbn`` by ``patron_id``.

        Returns:
            True if a checkout was removed, False if there was none
        """
        stmt = delete(_CHECKOUTS).where(
            and_(_CHECKOUTS.c.isbn == isbn, _CHECKOUTS.c.patron_id == patron_id)
        )
        result = await safe_query(lambda: self.session.execute(stmt), "Failed to delete checkout")
        return result.rowcount > 0

    async def delete_all(self) -> int:
        """Delete every checkout. Returns the number of rows removed."""
        result = await safe_query(
            lambda: self.session.execute(delete(_CHECKOUTS)), "Failed to delete checkouts"
        )
        return result.rowcount
