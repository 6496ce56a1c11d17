"""
Database session management with SQLAlchemy async
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from sqlalchemy.ext.asyncio import (
    create_async_engine, AsyncConnection, AsyncEngine, AsyncSession, async_sessionmaker
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from core.config import settings
from core.exceptions import TrackedDatabaseConnectionError, TrackedDatabaseNotFoundError
from models.tracked_database import TrackedDatabase
import logging

logger = logging.getLogger(__name__)

# Create async engine for the administrative registry
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    poolclass=NullPool,
    future=True
)

# Create session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


async def get_session() -> AsyncSession:
    """Get database session"""
    async with async_session_maker() as session:
        yield session


class TrackedDatabaseConnector:
    """
    Opens scoped connections to registered tracked databases.

    One connection is opened per eligibility check or list operation and is
    closed on every exit path. Engines are kept per URL so that repeated
    checks against the same database do not rebuild the dialect.
    """

    def __init__(self, connect_timeout: int = settings.TRACKED_DB_CONNECT_TIMEOUT):
        self.connect_timeout = connect_timeout
        self._engines: Dict[str, AsyncEngine] = {}

    async def resolve(self, database_ref: str, session: AsyncSession) -> TrackedDatabase:
        """Look up a tracked database by id"""
        tracked = await session.get(TrackedDatabase, database_ref)
        if tracked is None:
            raise TrackedDatabaseNotFoundError(
                "Tracked database not found",
                context={"database_ref": database_ref}
            )
        return tracked

    def _engine_for(self, database_url: str) -> AsyncEngine:
        if database_url not in self._engines:
            self._engines[database_url] = create_async_engine(
                database_url,
                echo=False,
                poolclass=NullPool,
                connect_args={"timeout": self.connect_timeout},
            )
        return self._engines[database_url]

    @asynccontextmanager
    async def connect(self, database_ref: str, session: AsyncSession) -> AsyncIterator[AsyncConnection]:
        """
        Yield a connection to the tracked database behind database_ref.

        Raises:
            TrackedDatabaseNotFoundError: If the reference is not registered
            TrackedDatabaseConnectionError: If the connection cannot be opened
        """
        tracked = await self.resolve(database_ref, session)

        try:
            connection = await self._engine_for(tracked.database_url).connect()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.error(f"Connection to tracked database {tracked.database_name} failed: {e}")
            raise TrackedDatabaseConnectionError(
                "Failed to connect to tracked database",
                context={
                    "database_ref": database_ref,
                    "database_name": tracked.database_name
                },
                original_exception=e
            )

        try:
            yield connection
        finally:
            await connection.close()

    async def dispose(self):
        """Dispose every engine opened so far"""
        for tracked_engine in self._engines.values():
            await tracked_engine.dispose()
        self._engines.clear()
