"""Health check router."""

from fastapi import APIRouter, Depends

from ... import __version__
from ...config import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)) -> dict:
    """Liveness probe. Does not touch the control plane or the database."""
    return {"status": "ok", "service": settings.service_name, "version": __version__}
