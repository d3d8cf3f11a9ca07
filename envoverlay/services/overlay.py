"""Layering env files over the process environment, reversibly.

``OverlayManager`` loads variables from an ordered list of env files into an
environment table (``os.environ`` unless another mapping is injected) and
remembers which file set each one. Unloading a file puts every variable it
owned back the way it was before the overlay existed: the baseline value is
restored, or the variable is removed if the baseline never had it. A variable
that was changed by someone else after the overlay wrote it is left alone.

Precedence: the first file to claim a name keeps it. In a batch load that
means earlier entries in the list win; a later file defining the same name is
refused, never allowed to overwrite.

Every operation, queries included, runs under one lock, so concurrent callers
never observe a half-applied load.
"""

import os
import threading
from collections.abc import Iterable, Iterator, MutableMapping
from contextlib import contextmanager
from typing import Optional

from envoverlay.core.errors import EnvFileReadError, OverlayError, OverlayStateError
from envoverlay.models.responses import FileContribution, OverlaySnapshot, VariableSource
from envoverlay.services import diagnostics
from envoverlay.services.baseline import BaselineEnvironment
from envoverlay.services.diagnostics import Verbosity
from envoverlay.services.environ import EnvironmentWriter, RestoreAction
from envoverlay.services.ledger import OverlayLedger, VariableRecord
from envoverlay.services.parser import EnvEntry, read_env_file

PathLike = str | os.PathLike


class OverlayManager:
    """Reversible overlay of env files on an environment table."""

    def __init__(
        self,
        environ: Optional[MutableMapping[str, str]] = None,
        baseline: Optional[BaselineEnvironment] = None,
    ):
        self._writer = EnvironmentWriter(environ)
        # Taken before any write and never refreshed.
        self.baseline = baseline if baseline is not None else BaselineEnvironment.capture(self._writer.environ)
        self._ledger = OverlayLedger()
        self._lock = threading.Lock()
        self._failure: Exception | None = None

    @contextmanager
    def _operation(self) -> Iterator[None]:
        """Hold the lock for one logical operation.

        An unexpected exception halfway through leaves the ledger and the
        environment out of step, so the manager refuses all further work.
        """
        with self._lock:
            if self._failure is not None:
                raise OverlayStateError(
                    f"overlay manager is unusable after an earlier failure: {self._failure!r}"
                ) from self._failure
            try:
                yield
            except OverlayError:
                raise
            except Exception as exc:
                self._failure = exc
                raise

    def load(self, file_path: PathLike, verbosity: Verbosity | None = None) -> int:
        """Load one env file, replacing whatever it contributed before.

        Args:
            file_path: Path to the env file.
            verbosity: Diagnostic threshold; ``None`` uses the configured default.

        Returns:
            Number of variables set from this file.

        Raises:
            EnvFileReadError: The file exists but cannot be read. Nothing changed.
        """
        path = os.fspath(file_path)
        with self._operation():
            entries = read_env_file(path)
            return self._load_locked(path, entries, verbosity)

    def load_many(self, file_paths: Iterable[PathLike] | None, verbosity: Verbosity | None = None) -> int:
        """Replace the whole overlay with the given files, first listed wins.

        Files tracked before the call but absent from *file_paths* are unloaded.
        Unreadable files are reported and skipped; this method does not raise
        for per-file problems.

        Returns:
            Total number of variables set across all files.
        """
        if file_paths is None:
            return 0
        paths = list(dict.fromkeys(os.fspath(p) for p in file_paths))

        with self._operation():
            pending = self._ledger.detach_all()
            total = 0
            for path in paths:
                try:
                    entries = read_env_file(path)
                except EnvFileReadError as exc:
                    diagnostics.warn(f"Critical error loading {path}: {exc.cause}", verbosity)
                    continue
                total += self._load_locked(path, entries, verbosity)
            self._release(
                {name: record for name, record in pending.items() if self._ledger.owner(name) is None},
                verbosity,
            )
            return total

    def unload(self, file_path: PathLike, verbosity: Verbosity | None = None) -> None:
        """Release every variable *file_path* owns. Unknown paths are a no-op."""
        path = os.fspath(file_path)
        with self._operation():
            self._release(self._ledger.detach_file(path), verbosity)

    def reload(self, file_path: PathLike, verbosity: Verbosity | None = None) -> int:
        """Unload then load *file_path* as a single operation.

        Raises:
            EnvFileReadError: The file exists but cannot be read. Its previous
                variables have been released.
        """
        path = os.fspath(file_path)
        with self._operation():
            try:
                entries = read_env_file(path)
            except EnvFileReadError:
                self._release(self._ledger.detach_file(path), verbosity)
                raise
            return self._load_locked(path, entries, verbosity)

    def cleanup(self, verbosity: Verbosity | None = None) -> None:
        """Unload every tracked file."""
        with self._operation():
            self._release(self._ledger.detach_all(), verbosity)

    def _load_locked(self, path: str, entries: list[EnvEntry] | None, verbosity: Verbosity | None) -> int:
        previous = self._ledger.detach_file(path)
        if entries is None:
            diagnostics.warn(f"The environment file specified '{path}' was not found.", verbosity)
            self._release(previous, verbosity)
            return 0

        self._ledger.track(path)
        applied: set[str] = set()
        for entry in entries:
            if not entry.ok:
                diagnostics.warn(
                    f"Parsing failed within the specified environment file: {path} "
                    f"at line {entry.line}: {entry.error}: {entry.original!r}",
                    verbosity,
                )
                continue
            owner = self._ledger.owner(entry.key)
            if owner is not None and owner != path:
                diagnostics.debug(
                    f"Variable '{entry.key}' already loaded from '{owner}', skipping value from '{path}'",
                    verbosity,
                )
                continue
            try:
                self._writer.apply(entry.key, entry.value)
            except ValueError as exc:
                diagnostics.warn(f"Could not set '{entry.key}' from {path} at line {entry.line}: {exc}", verbosity)
                continue
            self._ledger.claim(entry.key, path, entry.value)
            applied.add(entry.key)

        self._release(
            {name: record for name, record in previous.items() if self._ledger.owner(name) is None},
            verbosity,
        )
        return len(applied)

    def _release(self, records: dict[str, VariableRecord], verbosity: Verbosity | None) -> None:
        for name, record in records.items():
            action = self._writer.restore(name, record.value, self.baseline)
            if action is RestoreAction.RESTORED:
                diagnostics.debug(
                    f"Variable '{name}' restored to original value as it's no longer present in any loaded file",
                    verbosity,
                )
            elif action is RestoreAction.REMOVED:
                diagnostics.debug(
                    f"Variable '{name}' removed from environment as it's no longer present in any loaded file",
                    verbosity,
                )
            else:
                diagnostics.debug(
                    f"Variable '{name}' was changed outside the overlay since '{record.source}' set it; leaving it",
                    verbosity,
                )

    def variables(self) -> dict[str, VariableRecord]:
        """Every managed variable with its owning file and written value."""
        with self._operation():
            return self._ledger.records()

    def get_variable_source(self, name: str) -> str | None:
        """The file that owns *name*, or ``None`` if the overlay does not manage it."""
        with self._operation():
            return self._ledger.owner(name)

    def variables_from(self, file_path: PathLike) -> dict[str, str]:
        """Variables currently contributed by one file."""
        path = os.fspath(file_path)
        with self._operation():
            return {name: record.value for name, record in self._ledger.records_from(path).items()}

    def is_managed(self, name: str) -> bool:
        with self._operation():
            return self._ledger.owner(name) is not None

    def tracked_files(self) -> list[str]:
        with self._operation():
            return self._ledger.files()

    def file_count(self) -> int:
        with self._operation():
            return len(self._ledger.files())

    def variable_count(self) -> int:
        with self._operation():
            return len(self._ledger)

    def snapshot(self) -> OverlaySnapshot:
        """A consistent, serializable view of the whole overlay."""
        with self._operation():
            records = self._ledger.records()
            return OverlaySnapshot(
                variables=[
                    VariableSource(name=name, value=record.value, source=record.source)
                    for name, record in sorted(records.items())
                ],
                files=[
                    FileContribution(path=path, variables=sorted(self._ledger.records_from(path)))
                    for path in self._ledger.files()
                ],
                file_count=len(self._ledger.files()),
                variable_count=len(records),
            )

    def __enter__(self) -> "OverlayManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


_process_manager: OverlayManager | None = None
_process_manager_lock = threading.Lock()


def get_overlay_manager() -> OverlayManager:
    """Get the process-wide overlay manager over ``os.environ``.

    This is the only global overlay instance; everything else should construct
    or be handed its own ``OverlayManager``. It is created, and the baseline
    captured, on the first call. ``functools.lru_cache`` may run its factory
    more than once under concurrent first calls, hence the explicit lock.
    """
    global _process_manager
    if _process_manager is None:
        with _process_manager_lock:
            if _process_manager is None:
                _process_manager = OverlayManager()
    return _process_manager


def load_env_files(file_paths: Iterable[PathLike], verbosity: Verbosity | None = None) -> int:
    """Load *file_paths* into the process-wide overlay. First listed wins."""
    return get_overlay_manager().load_many(list(file_paths), verbosity)
