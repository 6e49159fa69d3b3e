"""
Database package for the Lending Library.

This package provides:
- SQLAlchemy schema definitions and the full-text index (schema.py)
- Async engine and session management (session.py)
- Repositories for books and checkouts
- Translation of search strings into FTS5 queries (text_search.py)
"""

from .book_repository import BookRepository
from .checkout_repository import CheckoutRepository
from .repository import DuplicateError, RepositoryException
from .schema import Base, Book, Checkout
from .session import DatabaseManager
from .text_search import to_match_expression

__all__ = [
    "Base",
    "Book",
    "BookRepository",
    "Checkout",
    "CheckoutRepository",
    "DatabaseManager",
    "DuplicateError",
    "RepositoryException",
    "to_match_expression",
]
