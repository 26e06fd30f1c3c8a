"""
Database Configuration.

SQLAlchemy async engine and session management.

The engine and its session factory live on a `Database` handle that the
application lifespan constructs once, stores on `app.state`, and disposes at
shutdown. Request handlers receive sessions through `get_db_session`.
"""

import asyncio
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from notes_api.core.config_schema import DatabaseSchema
from notes_api.core.logging import get_logger

logger = get_logger(__name__)


def create_engine_from_config(url: str, db_config: DatabaseSchema) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with a bounded connection pool.

    pool_size bounds idle connections, pool_size + max_overflow bounds open
    connections, and pool_recycle bounds connection lifetime.
    """
    engine = create_async_engine(
        url,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_recycle=db_config.pool_recycle,
        pool_pre_ping=db_config.pool_pre_ping,
        echo=db_config.echo,
    )
    logger.debug(
        "Database engine created",
        extra={"host": db_config.host, "pool_size": db_config.pool_size},
    )
    return engine


class Database:
    """
    Process-lifetime handle on the engine and its session factory.

    Usage:
        database = Database.from_config()
        await database.ping(timeout=5)
        async with database.session_factory() as session:
            ...
        await database.dispose()
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_config(cls) -> "Database":
        """Build the handle from database.yaml and config/.env."""
        from notes_api.core.config import get_app_config, get_database_url

        return cls(create_engine_from_config(get_database_url(), get_app_config().database))

    async def ping(self, timeout: float) -> None:
        """
        Verify connectivity with a bounded-time round-trip.

        Raises:
            TimeoutError: If the database does not answer within timeout
            SQLAlchemyError: If the connection or query fails
        """
        async with asyncio.timeout(timeout):
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.debug("Database engine disposed")


def get_database(request: Request) -> Database:
    """Return the handle the lifespan stored on the application."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not initialized; is the application lifespan running?")
    return database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    The session commits when the request finishes cleanly and rolls back
    otherwise.

    Usage in endpoints:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database = get_database(request)
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
