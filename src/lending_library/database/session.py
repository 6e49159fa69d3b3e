"""
Database session management for the Lending Library.

``DatabaseManager`` owns the async SQLAlchemy engine. It is constructed
explicitly, handed to the library, and closed explicitly when the process is
done with it:

```python
db = DatabaseManager("sqlite+aiosqlite:///library.db")
await db.init_database()
try:
    library = LendingLibrary(db)
    ...
finally:
    await db.close()
```

Each library operation runs inside one ``session_scope()``, which is one
store transaction. On SQLite every transaction is opened with
``BEGIN IMMEDIATE`` so writers are serialized by the database itself; a
read-then-write inside one scope cannot interleave with another writer.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .repository import RepositoryException
from .schema import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manages the database engine and sessions for the library.

    Args:
        database_url: SQLAlchemy async URL, e.g. ``sqlite+aiosqlite:///library.db``
        busy_timeout: seconds a SQLite writer waits for the write lock
        echo: echo SQL through the ``sqlalchemy.engine`` logger
    """

    def __init__(self, database_url: str, busy_timeout: float = 5.0, echo: bool = False):
        self.database_url = database_url
        self.busy_timeout = busy_timeout
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def engine(self) -> AsyncEngine:
        """
        Get or create the async engine.

        SQLite connections get foreign keys enabled and open every
        transaction with BEGIN IMMEDIATE.
        """
        if self._engine is None:
            if self.is_sqlite:
                self._engine = create_async_engine(
                    self.database_url,
                    connect_args={"timeout": self.busy_timeout},
                    echo=self.echo,
                )

                @event.listens_for(self._engine.sync_engine, "connect")
                def set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
                    # Take over transaction control from the driver so the
                    # "begin" hook below decides how transactions start.
                    dbapi_connection.isolation_level = None
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()

                @event.listens_for(self._engine.sync_engine, "begin")
                def begin_immediate(conn):
                    conn.exec_driver_sql("BEGIN IMMEDIATE")
            else:
                self._engine = create_async_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,
                    echo=self.echo,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                autoflush=False,
                # Keep returned rows usable after commit
                expire_on_commit=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional scope around a series of operations.

        Commits on normal exit and rolls back on any exception. Database
        failures surface as ``RepositoryException``.
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
            logger.debug("Database transaction committed successfully")
        except SQLAlchemyError as e:
            logger.exception("Database error, rolling back")
            await session.rollback()
            raise RepositoryException(f"Database error: {e!s}") from e
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def init_database(self, drop_existing: bool = False) -> None:
        """
        Create the schema, including the full-text index.

        Args:
            drop_existing: If True, drop all tables before creating

        Raises:
            RepositoryException: If the database cannot be reached
        """
        try:
            async with self.engine.begin() as conn:
                if drop_existing:
                    logger.warning("Dropping all existing tables...")
                    await conn.run_sync(Base.metadata.drop_all)

                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise RepositoryException(f"Database initialization failed: {e!s}") from e
        logger.info("Database initialization complete")

    async def verify_connection(self) -> bool:
        """Check that the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database connection verified")
            return True
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False

    async def close(self) -> None:
        """
        Dispose of the engine and its connections.

        The manager can be reused afterwards; a new engine is created lazily.
        """
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None
