"""
StackIt Backend — Health Check Route
======================================

GET /health answers 200 while the database accepts queries and 503 otherwise,
so a load balancer stops routing to an instance that cannot serve questions.
Not rate limited, not access-logged.
"""

import logging
import time

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from stackit import __version__
from stackit import database
from stackit.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

STARTED_AT = time.monotonic()


async def database_is_reachable() -> bool:
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database probe failed: %s: %s", type(e).__name__, e)
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    reachable = await database_is_reachable()
    if not reachable:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.monotonic() - STARTED_AT, 2),
    )
