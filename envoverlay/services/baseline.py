"""Snapshot of the environment as it was before the overlay touched it."""

import os
from collections.abc import Iterator, Mapping
from types import MappingProxyType


class BaselineEnvironment(Mapping[str, str]):
    """Immutable copy of an environment table.

    A baseline is taken once, before the overlay performs any write, and is
    never refreshed. It answers a single question: what should a variable go
    back to once no env file owns it any more.
    """

    def __init__(self, values: Mapping[str, str] | None = None):
        self._values = MappingProxyType(dict(values or {}))

    @classmethod
    def capture(cls, source: Mapping[str, str] | None = None) -> "BaselineEnvironment":
        """Read every variable from *source* (``os.environ`` by default)."""
        return cls(os.environ if source is None else source)

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"BaselineEnvironment({len(self._values)} variables)"
