"""
Unit Tests for Base Service.

Tests the BaseService class methods and error handling.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from sqlalchemy.exc import IntegrityError, OperationalError

from notes_api.services.base import BaseService
from notes_api.core.exceptions import (
    DeadlineExceededError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


class TestBaseServiceInit:
    """Tests for BaseService initialization."""

    def test_init_stores_session(self):
        """Should store the provided session."""
        mock_session = AsyncMock()

        service = BaseService(mock_session)

        assert service.session is mock_session

    def test_zero_timeout_disables_deadline(self):
        """A timeout of 0 means no deadline."""
        assert BaseService(AsyncMock(), timeout=0)._timeout is None

    def test_timeout_is_kept(self):
        """A positive timeout is used as given."""
        assert BaseService(AsyncMock(), timeout=2.5)._timeout == 2.5


class TestExecuteDbOperation:
    """Tests for _execute_db_operation method."""

    @pytest.fixture
    def service(self):
        """Create a BaseService instance with a short deadline."""
        return BaseService(AsyncMock(), timeout=0.05)

    @pytest.mark.asyncio
    async def test_returns_result_on_success(self, service):
        """Should return the coroutine result on success."""
        async def successful_operation():
            return 7

        assert await service._execute_db_operation("get", successful_operation()) == 7

    @pytest.mark.asyncio
    async def test_integrity_error_becomes_persistence_error(self, service):
        """Constraint violations are storage failures."""
        async def failing_operation():
            raise IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))

        with pytest.raises(PersistenceError) as exc_info:
            await service._execute_db_operation("create_note_with_log", failing_operation())

        assert exc_info.value.code == "SYS_DATABASE_ERROR"
        assert isinstance(exc_info.value.__cause__, IntegrityError)

    @pytest.mark.asyncio
    async def test_sqlalchemy_error_becomes_persistence_error(self, service):
        """Connectivity failures are storage failures."""
        async def failing_operation():
            raise OperationalError("SELECT", {}, Exception("connection refused"))

        with pytest.raises(PersistenceError, match="get_note"):
            await service._execute_db_operation("get_note", failing_operation())

    @pytest.mark.asyncio
    async def test_application_errors_pass_through(self, service):
        """NotFoundError from the repository is not wrapped."""
        async def missing():
            raise NotFoundError("Note not found")

        with pytest.raises(NotFoundError):
            await service._execute_db_operation("get_note", missing())

    @pytest.mark.asyncio
    async def test_deadline_exceeded(self, service):
        """An operation outliving the deadline raises DeadlineExceededError."""
        with pytest.raises(DeadlineExceededError) as exc_info:
            await service._execute_db_operation("slow", asyncio.sleep(1))

        assert exc_info.value.code == "SYS_DEADLINE_EXCEEDED"

    @pytest.mark.asyncio
    async def test_no_deadline_without_timeout(self):
        """Without a timeout the operation runs to completion."""
        service = BaseService(AsyncMock())

        async def slowish():
            await asyncio.sleep(0.01)
            return "done"

        assert await service._execute_db_operation("slowish", slowish()) == "done"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Caller cancellation is re-raised, never swallowed."""
        service = BaseService(AsyncMock())
        started = asyncio.Event()

        async def blocked():
            started.set()
            await asyncio.sleep(10)

        task = asyncio.create_task(service._execute_db_operation("blocked", blocked()))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestValidateRequired:
    """Tests for _validate_required method."""

    @pytest.fixture
    def service(self):
        """Create a BaseService instance."""
        return BaseService(AsyncMock())

    def test_passes_when_present(self, service):
        """Should not raise when all required fields are present."""
        service._validate_required({"title": "A"}, ["title"])

    @pytest.mark.parametrize("fields", [{}, {"title": None}, {"title": "  "}])
    def test_raises_when_missing_or_blank(self, service, fields):
        """Missing, null and whitespace-only values are all rejected."""
        with pytest.raises(ValidationError) as exc_info:
            service._validate_required(fields, ["title"])

        assert exc_info.value.details == {"missing_fields": ["title"]}
