"""Verbosity-gated diagnostic output."""

import sys
from enum import IntEnum


class Verbosity(IntEnum):
    """How chatty the overlay is allowed to be. Higher means more output."""

    QUIET = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

    @classmethod
    def parse(cls, value: str | None, default: "Verbosity | None" = None) -> "Verbosity":
        """Parse a level name such as ``debug`` or ``WARNING``."""
        fallback = cls.INFO if default is None else default
        if value is None:
            return fallback
        text = str(value).strip().upper()
        if text == "WARNING":
            text = "WARN"
        try:
            return cls[text]
        except KeyError:
            return fallback


def resolve_verbosity(verbosity: Verbosity | None) -> Verbosity:
    """Return *verbosity*, or the configured default when it is ``None``."""
    if verbosity is not None:
        return verbosity
    # config imports Verbosity from this module
    from envoverlay.core.config import config

    return config.LOG_LEVEL


def warn(message: str, verbosity: Verbosity | None = None) -> None:
    """Print a warning when verbosity is at least INFO."""
    if resolve_verbosity(verbosity) >= Verbosity.INFO:
        print(f"WARNING: {message}", file=sys.stderr, flush=True)


def debug(message: str, verbosity: Verbosity | None = None) -> None:
    """Print a debug line when verbosity is at least DEBUG."""
    if resolve_verbosity(verbosity) >= Verbosity.DEBUG:
        print(f"DEBUG: {message}", file=sys.stderr, flush=True)


def error(message: str, verbosity: Verbosity | None = None) -> None:
    """Print an error line unless output is silenced."""
    if resolve_verbosity(verbosity) >= Verbosity.ERROR:
        print(f"[ERROR] {message}", file=sys.stderr, flush=True)
