"""
Lending Library Package.

A small lending library: a catalog of books with copy counts, and a ledger of
which patron holds which book.

Key Components:
- models: Pydantic models for books and command requests
- validation: turns raw requests into typed requests or structured errors
- database: SQLAlchemy tables, repositories and session management
- catalog: adding, merging and searching books
- ledger: checking books out and returning them
- library: the command-level API tying validation to catalog and ledger
- cli: the ``lending-library`` command
"""

__version__ = "0.1.0"

from .errors import Err, ErrorCode, ErrResult, OkResult
from .library import LendingLibrary, make_lending_library

__all__ = [
    "__version__",
    "Err",
    "ErrResult",
    "ErrorCode",
    "LendingLibrary",
    "OkResult",
    "make_lending_library",
]
