"""
Health Check Endpoints.

    /health        liveness: the process answers
    /health/ready  readiness: the notes table can be queried within
                   timeouts.database seconds

Readiness counts notes rather than sending SELECT 1, so an unmigrated
database reports unhealthy instead of failing on the first real request.
"""

import asyncio
import time
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from modules.backend.core.logging import get_logger
from modules.backend.core.utils import utc_now
from modules.backend.models.note import Note

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    from modules.backend.core.database import get_session_factory

    started = time.perf_counter()
    try:
        async with get_session_factory()() as session:
            result = await session.execute(select(func.count()).select_from(Note))
            note_count = result.scalar_one()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "latency_ms": int((time.perf_counter() - started) * 1000),
        "notes": note_count,
    }


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> JSONResponse:
    """200 when the store answers in time, 503 otherwise."""
    from modules.backend.core.config import get_app_config

    timeout = get_app_config().application.timeouts.database
    try:
        async with asyncio.timeout(timeout):
            database = await check_database()
    except TimeoutError:
        database = {"status": "unhealthy", "error": f"no answer within {timeout}s"}

    healthy = database["status"] == "healthy"
    if not healthy:
        logger.warning("Readiness check failed", extra={"database": database})

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "checks": {"database": database},
            "timestamp": utc_now().isoformat(),
        },
    )
