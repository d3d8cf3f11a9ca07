"""Ownership bookkeeping for overlaid variables."""

from dataclasses import dataclass


@dataclass(frozen=True)
class VariableRecord:
    """A managed variable: which file set it and what value was written."""

    source: str
    value: str


class OverlayLedger:
    """Tracks which env file owns each managed variable.

    ``_records`` maps a variable name to its single owner, ``_files`` maps a
    file path to the names it currently owns. The two views are always kept in
    step. Not thread-safe; callers hold the manager's lock.
    """

    def __init__(self):
        self._records: dict[str, VariableRecord] = {}
        self._files: dict[str, set[str]] = {}

    def owner(self, name: str) -> str | None:
        record = self._records.get(name)
        return record.source if record else None

    def get(self, name: str) -> VariableRecord | None:
        return self._records.get(name)

    def track(self, path: str) -> None:
        """Start tracking *path*, even before it contributes anything."""
        self._files.setdefault(path, set())

    def claim(self, name: str, path: str, value: str) -> None:
        """Record that *path* wrote *value* to *name*.

        Raises:
            ValueError: *name* is already owned by a different file.
        """
        current = self._records.get(name)
        if current is not None and current.source != path:
            raise ValueError(f"{name} is already owned by {current.source}")
        self._records[name] = VariableRecord(source=path, value=value)
        self._files.setdefault(path, set()).add(name)

    def detach_file(self, path: str) -> dict[str, VariableRecord]:
        """Forget *path* and hand back the records it owned."""
        names = self._files.pop(path, set())
        return {name: self._records.pop(name) for name in names}

    def detach_all(self) -> dict[str, VariableRecord]:
        """Forget every file and hand back every record."""
        detached = self._records
        self._records = {}
        self._files = {}
        return detached

    def is_tracked(self, path: str) -> bool:
        return path in self._files

    def records(self) -> dict[str, VariableRecord]:
        return dict(self._records)

    def records_from(self, path: str) -> dict[str, VariableRecord]:
        return {name: self._records[name] for name in self._files.get(path, ())}

    def files(self) -> list[str]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._records)
