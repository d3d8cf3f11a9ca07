"""FastAPI dependency injection setup."""

from fastapi import HTTPException

from envoverlay.core.config import config
from envoverlay.services.overlay import OverlayManager, get_overlay_manager


def get_manager() -> OverlayManager:
    """Get the overlay manager the API operates on."""
    return get_overlay_manager()


def require_write_enabled():
    """Dependency to check if overlay mutations are enabled."""
    if not config.ALLOW_WRITES:
        raise HTTPException(status_code=403, detail="Overlay mutations are disabled (ENV_OVERLAY_ALLOW_WRITES)")
    return True
