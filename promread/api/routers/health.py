"""Health check router for promread API.

This module provides health check endpoints for monitoring
and load balancer integration.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel

from promread import __version__

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    version: str


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Basic health check endpoint.

    Example:
        GET /health
        {
            "status": "healthy",
            "version": "0.1.0"
        }
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
)
async def readiness_check(request: Request, response: Response) -> HealthResponse:
    """Readiness check for Kubernetes/load balancers.

    Ready once the remote read service has been created; 503 before that.
    """
    ready = getattr(request.app.state, "read_service", None) is not None
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="ready" if ready else "starting",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )


@router.get(
    "/live",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def liveness_check() -> HealthResponse:
    """Liveness check for Kubernetes."""
    return HealthResponse(
        status="alive",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )
