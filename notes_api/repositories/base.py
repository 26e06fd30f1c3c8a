"""
Base Repository.

Base class for all repositories with common CRUD operations and scoped
transactions. Repositories let SQLAlchemy errors propagate; services
translate them.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.exceptions import NotFoundError
from notes_api.core.logging import get_logger
from notes_api.models.base import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

# Dialects whose drivers reject per-transaction isolation levels such as
# READ COMMITTED. Transactions on them run at the connection default.
_FIXED_ISOLATION_DIALECTS = frozenset({"sqlite"})


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the model class:

        class NoteRepository(BaseRepository[Note]):
            model = Note
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: int) -> ModelType:
        """
        Get a single record by ID.

        Raises:
            NotFoundError: If record not found
        """
        instance = await self.get_by_id_or_none(id)

        if instance is None:
            raise NotFoundError(f"{self.model.__name__} not found")

        return instance

    async def get_by_id_or_none(self, id: int) -> ModelType | None:
        """Get a single record by ID, returning None if not found."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new record and return it with store-assigned fields loaded."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update_by_id(self, id: int, **values: Any) -> bool:
        """
        Write the given column values to one record.

        Returns:
            True if a row was updated, False if no record has this ID
        """
        result = await self.session.execute(
            update(self.model).where(self.model.id == id).values(**values)
        )
        return result.rowcount > 0

    async def delete_by_id(self, id: int) -> bool:
        """
        Delete a record by ID.

        A missing record is not an error at this layer.

        Returns:
            True if a row was deleted, False if no record has this ID
        """
        result = await self.session.execute(
            delete(self.model).where(self.model.id == id)
        )
        return result.rowcount > 0

    @asynccontextmanager
    async def transaction(self, isolation_level: str | None = None) -> AsyncIterator[None]:
        """
        Scope a unit of work that commits only if the block exits cleanly.

        Any exception, including cancellation, rolls the work back before it
        propagates. If the session already has a transaction open, the block
        runs inside a SAVEPOINT of that transaction instead; the isolation
        level is then whatever the outer transaction uses.

        Usage:
            async with repo.transaction(isolation_level="READ COMMITTED"):
                ...
        """
        if self.session.in_transaction():
            async with self.session.begin_nested():
                yield
            return

        async with self.session.begin():
            if isolation_level is not None and self._supports_isolation_level():
                await self.session.connection(
                    execution_options={"isolation_level": isolation_level},
                )
            yield

    def _supports_isolation_level(self) -> bool:
        dialect = self.session.get_bind().dialect.name
        if dialect in _FIXED_ISOLATION_DIALECTS:
            logger.debug(
                "Isolation level not configurable, using connection default",
                extra={"dialect": dialect},
            )
            return False
        return True
