"""
Recipe Book Backend — Health Check & Root Routes
=================================================

What:  GET /health for monitoring and load balancer probes, and GET / as a
       human-friendly landing response.
How:   /health runs a SELECT 1 against the shared engine. The endpoint
       always answers 200; `status` and `db` carry the verdict.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app import __version__
from app.database import check_database
from app.schemas.recipe import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Reports process liveness and database connectivity.",
)
async def health_check() -> HealthResponse:
    db_connected = await check_database()
    return HealthResponse(
        status="ok" if db_connected else "degraded",
        db="connected" if db_connected else "disconnected",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "Welcome to the Recipe Book API"
