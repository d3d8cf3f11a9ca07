"""Response models for the overlay."""

from typing import Any

from pydantic import BaseModel


class VariableSource(BaseModel):
    """A managed variable and the file that set it."""
    name: str
    value: str
    source: str


class FileContribution(BaseModel):
    """Variables currently owned by one tracked file."""
    path: str
    variables: list[str]


class OverlaySnapshot(BaseModel):
    """Point-in-time view of everything the overlay manages."""
    variables: list[VariableSource]
    files: list[FileContribution]
    file_count: int
    variable_count: int


class LoadResponse(BaseModel):
    """Result of a load, reload or unload request."""
    loaded: int
    files: list[str]
    variable_count: int


class ErrorResponse(BaseModel):
    """Standard error response model."""
    detail: str
    error_code: str | None = None
    timestamp: str | None = None
    correlation_id: str | None = None


class SuccessResponse(BaseModel):
    """Standard success response model."""
    success: bool = True
    message: str | None = None
    data: dict[str, Any] | None = None
