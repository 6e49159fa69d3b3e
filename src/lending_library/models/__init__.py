"""
Lending Library models.

Pydantic models for catalog records and for the typed form of each command's
request.
"""

from .book import GUTENBERG_YEAR, MAX_STORED_INT, AddBookRequest, Book
from .requests import FindBooksRequest, LendRequest

__all__ = [
    "GUTENBERG_YEAR",
    "MAX_STORED_INT",
    "AddBookRequest",
    "Book",
    "FindBooksRequest",
    "LendRequest",
]
