"""Request models for API endpoints."""

from pydantic import BaseModel, field_validator

from envoverlay.services.diagnostics import Verbosity


def _parse_verbosity(value):
    if value is None or isinstance(value, Verbosity):
        return value
    if isinstance(value, int):
        return Verbosity(value)
    text = str(value).strip()
    if not text:
        return None
    if text.upper() not in Verbosity.__members__ and text.upper() != "WARNING":
        raise ValueError(f"Unknown log level: {value}")
    return Verbosity.parse(text)


class LoadFilesRequest(BaseModel):
    paths: list[str]
    log_level: Verbosity | None = None

    @field_validator("paths", mode="before")
    @classmethod
    def _coerce_paths(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, tuple):
            value = list(value)
        cleaned: list[str] = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if not text:
                continue
            cleaned.append(text)
        return cleaned

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_log_level(cls, value):
        return _parse_verbosity(value)


class FileRequest(BaseModel):
    path: str
    log_level: Verbosity | None = None

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: str):
        value = value.strip()
        if not value:
            raise ValueError("path must not be empty")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_log_level(cls, value):
        return _parse_verbosity(value)
