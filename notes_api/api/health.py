"""
Health Check Endpoints.

Provides liveness and readiness checks.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (database reachable)
"""

import time
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from notes_api.core.config import get_app_config
from notes_api.core.database import Database
from notes_api.core.logging import get_logger
from notes_api.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database(database: Database | None, timeout: float) -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    if database is None:
        return {"status": "unhealthy", "error": "database not initialized"}

    start = time.perf_counter()
    try:
        await database.ping(timeout=timeout)
    except TimeoutError:
        logger.warning("Database health check timed out", extra={"timeout": timeout})
        return {"status": "unhealthy", "error": f"no response within {timeout}s"}
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "latency_ms": int((time.perf_counter() - start) * 1000),
    }


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running. No dependency checks.
    """
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check(request: Request) -> dict[str, Any]:
    """
    Readiness check.

    Returns 200 if ready to serve traffic, 503 if the database does not
    answer within the configured timeout.
    """
    timeout = get_app_config().observability.health_checks.ready_timeout_seconds
    database = getattr(request.app.state, "database", None)

    checks = {"database": await check_database(database, timeout)}

    if checks["database"]["status"] != "healthy":
        logger.warning("Readiness check failed", extra={"checks": checks})
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "checks": checks,
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "status": "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }
