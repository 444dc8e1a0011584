"""
Notekeeper Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   A running process that cannot reach its storage backend is effectively
       down; load balancers should route away from it.
How:   Issues one cheap read (count_deleted) through the repository.
Who:   Called by container health checks, load balancers, and monitoring.

Status levels:
    healthy:    backend answered                        (HTTP 200)
    unhealthy:  backend unreachable or failing          (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from notekeeper import __version__
from notekeeper.exceptions import NotekeeperError
from notekeeper.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Storage backend unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    repository = getattr(request.app.state, "repository", None)
    backend = getattr(repository, "backend_name", "unknown")
    db_status = "connected"
    overall = "healthy"

    if repository is None:
        db_status = "disconnected"
        overall = "unhealthy"
    else:
        try:
            await repository.count_deleted()
        except NotekeeperError as e:
            db_status = "disconnected"
            overall = "unhealthy"
            logger.warning("Health check: %s backend unreachable: %s", backend, e.message)

    body = HealthResponse(
        status=overall,
        version=__version__,
        backend=backend,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
