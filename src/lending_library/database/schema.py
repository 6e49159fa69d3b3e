"""
SQLAlchemy database schema for the Lending Library.

Two tables back the library:

- ``books``: one row per title, keyed by isbn, with the number of copies the
  library owns
- ``checkouts``: one row per live checkout of a title by a patron

Available copies are never stored. They are derived by counting the
``checkouts`` rows for an isbn, so there is no counter to drift out of sync.

Full-text search uses an SQLite FTS5 table, ``books_fts``, over ``title`` and
``authors``. Triggers keep it in sync with ``books``, and it is created and
dropped together with the ``books`` table.
"""

from sqlalchemy import (
    DDL,
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Book(Base):
    """
    Books table - the library's catalog.

    ``authors`` is stored as a JSON array so author order survives a round
    trip; merge comparisons depend on it.
    """

    __tablename__ = "books"

    isbn = Column(String(13), primary_key=True)
    title = Column(String(500), nullable=False)
    authors = Column(JSON, nullable=False)
    pages = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    publisher = Column(String(200), nullable=False)
    n_copies = Column(Integer, nullable=False, default=1)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=True, default=func.now(), onupdate=func.now())

    # Relationships
    checkouts = relationship("Checkout", back_populates="book")

    __table_args__ = (
        Index("idx_book_title", "title"),
        CheckConstraint("n_copies > 0", name="check_n_copies_positive"),
        CheckConstraint("pages > 0", name="check_pages_positive"),
        CheckConstraint("year >= 1448", name="check_year_valid"),
    )


class Checkout(Base):
    """
    Checkouts table - live loans of a title to a patron.

    A row exists exactly while the book is checked out; returning the book
    deletes it. The unique constraint allows one live checkout per
    (isbn, patron) pair.
    """

    __tablename__ = "checkouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    isbn = Column(String(13), ForeignKey("books.isbn"), nullable=False)
    patron_id = Column(String(200), nullable=False)
    checkout_date = Column(DateTime, nullable=False, default=func.now())

    # Relationships
    book = relationship("Book", back_populates="checkouts")

    __table_args__ = (
        Index("idx_checkout_isbn", "isbn"),
        UniqueConstraint("isbn", "patron_id", name="unique_isbn_patron"),
    )


# Full-text index over title and authors.  The FTS table is an external
# content table: it stores only the index and reads column values from books.
BOOK_SEARCH_DDL = (
    """
    CREATE VIRTUAL TABLE IF NOT EXISTS books_fts USING fts5(
        title, authors, content='books', tokenize='porter unicode61'
    )
    """,
    """
    CREATE TRIGGER IF NOT EXISTS books_fts_insert AFTER INSERT ON books BEGIN
        INSERT INTO books_fts(rowid, title, authors)
        VALUES (new.rowid, new.title, new.authors);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS books_fts_delete AFTER DELETE ON books BEGIN
        INSERT INTO books_fts(books_fts, rowid, title, authors)
        VALUES ('delete', old.rowid, old.title, old.authors);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS books_fts_update AFTER UPDATE ON books BEGIN
        INSERT INTO books_fts(books_fts, rowid, title, authors)
        VALUES ('delete', old.rowid, old.title, old.authors);
        INSERT INTO books_fts(rowid, title, authors)
        VALUES (new.rowid, new.title, new.authors);
    END
    """,
)

for _statement in BOOK_SEARCH_DDL:
    event.listen(Book.__table__, "after_create", DDL(_statement).execute_if(dialect="sqlite"))

event.listen(
    Book.__table__,
    "before_drop",
    DDL("DROP TABLE IF EXISTS books_fts").execute_if(dialect="sqlite"),
)
