"""Database management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# Registers the message tables with SQLModel.metadata
from anchor.infrastructure.persistence import models as _models  # noqa: F401
from anchor.infrastructure.persistence.exceptions import PersistenceError

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


def database_url(database_path: str) -> str:
    """Build the aiosqlite URL for a database path."""
    return f"sqlite+aiosqlite:///{database_path}"


class DatabaseManager:
    """Owns the async engine and session factory of the message store.

    The engine is created on first use. ``dispose`` closes it; a later
    call to ``get_engine`` opens a fresh one.
    """

    def __init__(self, database_path: str, echo: bool = False) -> None:
        """Initialize the manager.

        Args:
            database_path: SQLite file path, or ":memory:".
            echo: Log every SQL statement (SQLAlchemy echo mode).
        """
        self._database_path = database_path
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def database_path(self) -> str:
        return self._database_path

    def get_engine(self) -> AsyncEngine:
        """Get the engine, creating it (and the file's directory) if needed."""
        if self._engine is None:
            if self._database_path != IN_MEMORY:
                Path(self._database_path).parent.mkdir(parents=True, exist_ok=True)
            self._engine = create_async_engine(
                database_url(self._database_path), echo=self._echo
            )
            self._session_factory = async_sessionmaker(
                self._engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._engine

    async def create_tables(self) -> None:
        """Create missing tables.

        Raises:
            PersistenceError: The database cannot be opened or written.
        """
        engine = self.get_engine()
        try:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to initialize database {self._database_path}: {e}"
            ) from e
        logger.debug("Tables ready in %s", self._database_path)

    async def dispose(self) -> None:
        """Close all pooled connections."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session bound to the engine."""
        self.get_engine()
        assert self._session_factory is not None
        async with self._session_factory() as session:
            yield session
