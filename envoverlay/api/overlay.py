"""Overlay inspection and reload API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query

from envoverlay.core.dependencies import get_manager, require_write_enabled
from envoverlay.models.requests import FileRequest, LoadFilesRequest
from envoverlay.models.responses import (
    ErrorResponse,
    LoadResponse,
    OverlaySnapshot,
    SuccessResponse,
    VariableSource,
)
from envoverlay.services.overlay import OverlayManager

router = APIRouter(prefix="/api/overlay", tags=["overlay"])


@router.get("", response_model=OverlaySnapshot)
def get_overlay(manager: OverlayManager = Depends(get_manager)):
    """Every managed variable with its owning file."""
    return manager.snapshot()


@router.get(
    "/variables/{name}",
    response_model=VariableSource,
    responses={404: {"model": ErrorResponse}},
)
def get_variable(name: str, manager: OverlayManager = Depends(get_manager)):
    """A single managed variable."""
    record = manager.variables().get(name)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Variable {name} is not managed by the overlay")
    return VariableSource(name=name, value=record.value, source=record.source)


@router.get("/files", responses={404: {"model": ErrorResponse}})
def get_file_variables(path: str = Query(..., min_length=1), manager: OverlayManager = Depends(get_manager)):
    """Variables contributed by one tracked file."""
    if path not in manager.tracked_files():
        raise HTTPException(status_code=404, detail=f"File {path} is not tracked")
    return {"path": path, "variables": manager.variables_from(path)}


@router.post("/load", response_model=LoadResponse)
def load_files(
    payload: LoadFilesRequest,
    manager: OverlayManager = Depends(get_manager),
    _write_enabled=Depends(require_write_enabled),
):
    """Replace the overlay with the posted files, first listed wins."""
    loaded = manager.load_many(payload.paths, payload.log_level)
    return LoadResponse(loaded=loaded, files=manager.tracked_files(), variable_count=manager.variable_count())


@router.post(
    "/reload",
    response_model=LoadResponse,
    responses={422: {"model": ErrorResponse}},
)
def reload_file(
    payload: FileRequest,
    manager: OverlayManager = Depends(get_manager),
    _write_enabled=Depends(require_write_enabled),
):
    """Reload one file, typically after a change notification."""
    loaded = manager.reload(payload.path, payload.log_level)
    return LoadResponse(loaded=loaded, files=manager.tracked_files(), variable_count=manager.variable_count())


@router.post("/unload", response_model=LoadResponse)
def unload_file(
    payload: FileRequest,
    manager: OverlayManager = Depends(get_manager),
    _write_enabled=Depends(require_write_enabled),
):
    """Release every variable one file owns."""
    manager.unload(payload.path, payload.log_level)
    return LoadResponse(loaded=0, files=manager.tracked_files(), variable_count=manager.variable_count())


@router.post("/cleanup", response_model=SuccessResponse)
def cleanup_overlay(
    manager: OverlayManager = Depends(get_manager),
    _write_enabled=Depends(require_write_enabled),
):
    """Unload every tracked file."""
    released = manager.variable_count()
    manager.cleanup()
    return SuccessResponse(message="Overlay cleared", data={"released": released})
