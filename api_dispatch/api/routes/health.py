"""Health Probe — liveness endpoint for container orchestration.

Invariants:
    - GET /health/ always returns 200 if the process is up
    - Not routed through the dispatcher: no authorization, no envelope logging
"""

from fastapi import APIRouter, status

from api_dispatch import __version__

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "api-dispatch",
        "version": __version__,
    }
