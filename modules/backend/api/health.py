"""
Health Check Endpoints.

Provides liveness and readiness checks.

Endpoints:
- /api/health: Liveness check (process running)
- /api/health/ready: Readiness check (database reachable, upload dir writable)
"""

import asyncio
import os
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from sqlalchemy import text

from modules.backend.core.config import get_app_config
from modules.backend.core.logging import get_logger
from modules.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database(request: Request) -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    database = request.app.state.database
    start = utc_now()
    try:
        async with database.session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}

    latency_ms = int((utc_now() - start).total_seconds() * 1000)
    return {"status": "healthy", "latency_ms": latency_ms}


async def check_storage(request: Request) -> dict[str, Any]:
    """Check that the attachment directory exists and is writable."""
    root = request.app.state.file_storage.root
    writable = await asyncio.to_thread(lambda: root.is_dir() and os.access(root, os.W_OK))
    if not writable:
        return {"status": "unhealthy", "error": f"Upload directory not writable: {root}"}
    return {"status": "healthy"}


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Liveness check.

    Returns 200 if the process is running. No dependency checks.
    """
    return {
        "success": True,
        "message": "API is running",
        "timestamp": utc_now().isoformat(),
    }


@router.get("/health/ready")
async def readiness_check(request: Request) -> dict[str, Any]:
    """
    Readiness check.

    Returns 503 if the database or the upload directory is unavailable.
    """
    timeout = get_app_config().application.timeouts.database

    db_result: dict[str, Any] = {"status": "error", "error": "check did not run"}
    storage_result: dict[str, Any] = {"status": "error", "error": "check did not run"}

    try:
        async with asyncio.timeout(timeout):
            async with asyncio.TaskGroup() as tg:
                db_task = tg.create_task(check_database(request))
                storage_task = tg.create_task(check_storage(request))
            db_result = db_task.result()
            storage_result = storage_task.result()
    except* Exception as eg:
        for exc in eg.exceptions:
            logger.warning("Health check task failed", extra={"error": str(exc)})

    checks = {"database": db_result, "storage": storage_result}
    unhealthy = [name for name, check in checks.items() if check.get("status") != "healthy"]

    if unhealthy:
        logger.warning("Readiness check failed", extra={"unhealthy": unhealthy, "checks": checks})
        raise HTTPException(status_code=503, detail=f"Unhealthy: {', '.join(unhealthy)}")

    return {
        "success": True,
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }
