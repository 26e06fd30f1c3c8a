"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, apply per-call deadlines, and translate
storage failures into application exceptions.

Usage:
    from notes_api.services.base import BaseService

    class NoteService(BaseService):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(session)
            self.repo = NoteRepository(session)
"""

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.core.exceptions import (
    DeadlineExceededError,
    PersistenceError,
    ValidationError,
)
from notes_api.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Database session management
    - Per-call deadlines for database operations
    - Error wrapping for database operations
    - Common validation patterns

    Subclasses should:
    - Call super().__init__(session, timeout) in their __init__
    - Initialize repositories in __init__
    - Implement business logic methods
    """

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        """
        Initialize the service with a database session.

        Args:
            session: SQLAlchemy async session for database operations
            timeout: Deadline in seconds for each database operation;
                None or 0 means no deadline beyond caller cancellation
        """
        self._session = session
        self._timeout = timeout or None
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Awaitable[T],
    ) -> T:
        """
        Execute a database operation with deadline and error handling.

        Application errors raised by the repository (e.g. NotFoundError)
        pass through unchanged. Cancellation is logged and re-raised.

        Args:
            operation: Description of the operation for logging
            coro: Coroutine to execute

        Returns:
            Result of the coroutine

        Raises:
            DeadlineExceededError: If the deadline expires first
            PersistenceError: For database errors
        """
        try:
            async with asyncio.timeout(self._timeout):
                return await coro
        except TimeoutError:
            self._logger.warning(
                "Database operation deadline exceeded",
                extra={"operation": operation, "timeout": self._timeout},
            )
            raise DeadlineExceededError(f"Database operation timed out: {operation}")
        except asyncio.CancelledError:
            self._logger.info(
                "Database operation cancelled",
                extra={"operation": operation},
            )
            raise
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            raise PersistenceError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise PersistenceError(f"Database operation failed: {operation}") from e

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not blank.

        Raises:
            ValidationError: If any required field is missing or blank
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """Log a service operation with context."""
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """Log debug information."""
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
