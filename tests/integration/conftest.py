"""
Integration Test Fixtures.

Fixtures for integration tests - uses a real database and the real
request pipeline. These fixtures build on the root conftest.py database
fixtures.
"""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from notes_api.core.config import get_app_config
from notes_api.core.database import Database


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def database(db_engine: AsyncEngine) -> Database:
    """Database handle over the test engine, as the lifespan would build it."""
    return Database(db_engine)


@pytest.fixture
def app(database: Database) -> Generator[FastAPI, None, None]:
    """Application with the test database on app.state, as the lifespan would set it."""
    from notes_api.main import create_app

    application = create_app()
    application.state.database = database
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client backed by the test database.

    Every request gets its own session from get_db_session and commits or
    rolls back like it would in production.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


@pytest.fixture
def feature_flags(monkeypatch) -> Callable[..., None]:
    """
    Override feature flags for one test.

    Usage:
        def test_all(feature_flags):
            feature_flags(notes_unbounded_list_enabled=True)
    """
    def _set(**flags: bool) -> None:
        config = get_app_config()
        monkeypatch.setattr(config, "_features", config.features.model_copy(update=flags))

    return _set


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is a request validation error (400).

        Args:
            response: httpx Response object
            field: Expected field with validation error (optional)
        """
        data = ApiAssertions.assert_error(response, 400, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
