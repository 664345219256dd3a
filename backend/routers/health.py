"""Health router."""

from fastapi import APIRouter
from backend.models import HealthResponse
from compliance import __version__

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    """Health check."""
    from backend.main import controller
    return {
        "status": "ok",
        "version": __version__,
        "running": controller.is_running if controller else False,
    }
