"""
DevCamper Backend — Health Check Route
========================================

What:  GET /health for container health checks and load balancers.
How:   Runs SELECT 1 through the application's engine.

Status levels:
    healthy    database reachable (HTTP 200)
    unhealthy  database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from devcamper import __version__
from devcamper.context import AppContext, get_context
from devcamper.database import ping
from devcamper.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(context: AppContext = Depends(get_context)):
    db_status = "connected"
    overall = "healthy"

    try:
        await ping(context.engine)
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=body.model_dump(exclude_none=True),
    )
