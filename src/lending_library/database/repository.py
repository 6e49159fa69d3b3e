"""
Shared pieces of the repository layer.

Repositories wrap an ``AsyncSession`` and turn SQLAlchemy failures into
``RepositoryException``. The catalog and ledger turn those into DB errors;
nothing above this layer sees a SQLAlchemy exception.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError

from ..models import Book as BookModel

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RepositoryException(Exception):
    """Base exception for repository operations."""


class DuplicateError(RepositoryException):
    """Raised when a row with the same identity already exists."""


async def safe_query(query_func: Callable[[], Awaitable[T]], error_msg: str) -> T:
    """
    Await a query, translating database failures.

    Args:
        query_func: Zero-argument coroutine function performing the query
        error_msg: Context for the raised exception

    Raises:
        RepositoryException: If the query fails
    """
    try:
        return await query_func()
    except SQLAlchemyError as e:
        logger.exception("Query failed")
        raise RepositoryException(f"{error_msg}: {e!s}") from e


def to_book_model(row) -> BookModel:
    """Convert a ``books`` row (ORM object or Core row) to a ``Book``."""
    return BookModel(
        isbn=row.isbn,
        title=row.title,
        authors=list(row.authors),
        pages=row.pages,
        year=row.year,
        publisher=row.publisher,
        n_copies=row.n_copies,
    )
