"""Exception hierarchy for the environment overlay."""

import os


class OverlayError(Exception):
    """Base class for every error raised by the overlay manager."""


class EnvFileReadError(OverlayError):
    """An env file exists but could not be opened, read or decoded."""

    def __init__(self, path: str | os.PathLike, cause: BaseException):
        self.path = os.fspath(path)
        self.cause = cause
        super().__init__(f"Failed to read {self.path}: {cause}")


class OverlayStateError(OverlayError):
    """The manager's bookkeeping was interrupted mid-operation and can no longer be trusted."""
