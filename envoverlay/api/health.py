"""Health check API endpoints."""

from fastapi import APIRouter, Depends

from envoverlay.core.config import config
from envoverlay.core.dependencies import get_manager
from envoverlay.services.overlay import OverlayManager

router = APIRouter(tags=["health"])


@router.get("/healthz")
def health_check(manager: OverlayManager = Depends(get_manager)):
    """Basic health check endpoint."""
    return {
        "ok": True,
        "overlay": {
            "files": manager.file_count(),
            "variables": manager.variable_count(),
            "baseline_variables": len(manager.baseline),
        },
        "config": {
            "default_files": config.DEFAULT_ENV_FILES,
            "log_level": config.LOG_LEVEL.name.lower(),
            "writes_enabled": config.ALLOW_WRITES,
        },
    }
