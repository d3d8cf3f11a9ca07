"""Reading env files through python-dotenv's streaming parser."""

import os
from dataclasses import dataclass

from dotenv.parser import parse_stream

from envoverlay.core.errors import EnvFileReadError


@dataclass(frozen=True)
class EnvEntry:
    """One statement from an env file: a key/value pair or a parse error."""

    line: int
    key: str | None = None
    value: str | None = None
    error: str | None = None
    original: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


def read_env_file(path: str | os.PathLike, encoding: str = "utf-8") -> list[EnvEntry] | None:
    """Parse *path* into entries, in file order.

    Blank lines and comments are dropped. Returns ``None`` when the file does
    not exist. The whole file is parsed before returning, so a read failure
    surfaces before the caller has applied anything.

    Raises:
        EnvFileReadError: The file exists but cannot be opened or decoded.
    """
    if not os.path.exists(path):
        return None
    try:
        with open(path, encoding=encoding) as stream:
            bindings = list(parse_stream(stream))
    except FileNotFoundError:
        # Deleted between the existence check and the open.
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise EnvFileReadError(path, exc) from exc

    entries: list[EnvEntry] = []
    for binding in bindings:
        if binding.key is None and not binding.error:
            continue
        line, original = _locate(binding.original.string, binding.original.line)
        if binding.error:
            entries.append(EnvEntry(line=line, error="could not parse statement", original=original))
        elif binding.value is None:
            entries.append(
                EnvEntry(line=line, key=binding.key, error=f"missing '=' after {binding.key}", original=original)
            )
        else:
            entries.append(EnvEntry(line=line, key=binding.key, value=binding.value, original=original))
    return entries


def _locate(text: str, first_line: int) -> tuple[int, str]:
    """Skip the blank lines dotenv folds into a statement's original text."""
    stripped = text.lstrip()
    skipped = text[: len(text) - len(stripped)]
    return first_line + skipped.count("\n"), stripped.rstrip("\r\n")
