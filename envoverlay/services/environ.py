"""The single choke point for environment writes."""

import os
from collections.abc import Mapping, MutableMapping
from enum import Enum


class RestoreAction(str, Enum):
    """What happened to a variable when the overlay let go of it."""

    RESTORED = "restored"
    REMOVED = "removed"
    RELINQUISHED = "relinquished"


class EnvironmentWriter:
    """Apply and revert variable writes on an environment table.

    Every write the overlay performs goes through this class. It is not
    thread-safe on its own; ``OverlayManager`` holds its lock around each call.
    """

    def __init__(self, environ: MutableMapping[str, str] | None = None):
        self.environ = os.environ if environ is None else environ

    def get(self, name: str) -> str | None:
        return self.environ.get(name)

    def apply(self, name: str, value: str) -> None:
        """Set *name* to *value*.

        Raises:
            ValueError: The platform rejected the name or value (for example an
                embedded NUL byte). Nothing was written.
        """
        self.environ[name] = value

    def restore(self, name: str, written: str, baseline: Mapping[str, str]) -> RestoreAction:
        """Undo the overlay's write of *written* to *name*.

        If the live value no longer matches what the overlay wrote, someone else
        changed it and it is left alone. Otherwise the baseline value is put
        back, or the variable is removed when the baseline never had it.
        """
        if self.environ.get(name) != written:
            return RestoreAction.RELINQUISHED
        if name in baseline:
            self.environ[name] = baseline[name]
            return RestoreAction.RESTORED
        del self.environ[name]
        return RestoreAction.REMOVED
