"""
Health check router.

Provides a simple health endpoint for liveness/readiness probes.
No business logic. Returns application status, environment and version.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.core.config import Settings
from app.interfaces.accounts.dependencies import get_settings
from app.interfaces.accounts.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status, environment and version.",
)
def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Return current application health status."""
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.environment,
        version=settings.version,
    )
