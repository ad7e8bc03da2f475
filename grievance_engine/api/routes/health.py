"""Health check endpoint."""

from fastapi import APIRouter

from grievance_engine.api.models.health import HealthResponse
from grievance_engine.bootstrap.database import is_database_configured

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return health status and the configured store backend."""
    return HealthResponse(
        status="healthy",
        store="postgres" if is_database_configured() else "in_memory",
    )
