"""Application configuration management."""

import os

from envoverlay.services.diagnostics import Verbosity


def _bool_env(name: str, default: bool) -> bool:
    """Get boolean environment variable with fallback."""
    val = os.getenv(name)
    if val is None:
        return default
    text = str(val).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    return default


def _list_env(name: str, default: list[str] | None = None) -> list[str]:
    """Get comma-separated environment variable as a list of non-empty items."""
    val = os.getenv(name)
    if val is None:
        return list(default or [])
    return [item.strip() for item in val.split(",") if item.strip()]


class Config:
    """Application configuration."""

    # Files loaded by the HTTP service at startup and by the CLI by default
    DEFAULT_ENV_FILES = _list_env("ENV_OVERLAY_FILES")

    # Diagnostics
    LOG_LEVEL = Verbosity.parse(os.getenv("ENV_OVERLAY_LOG_LEVEL"), Verbosity.INFO)

    # HTTP service
    ALLOW_WRITES = _bool_env("ENV_OVERLAY_ALLOW_WRITES", True)


# Global configuration instance
config = Config()
