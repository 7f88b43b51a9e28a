"""Helpers for backend paths, which are plain absolute strings."""

from __future__ import annotations

import re
from typing import Final

from notedesk.errors import InvalidEntryName

WINDOWS_ROOT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]?$")


def _separator(path: str) -> str:
    if "/" in path:
        return "/"
    if "\\" in path:
        return "\\"
    return "/"


def parent_directory(path: str) -> str | None:
    """Return the parent of `path`, or None at a filesystem root."""
    trimmed = path.rstrip("/\\")
    if not trimmed or WINDOWS_ROOT_PATTERN.match(path):
        return None
    cut = max(trimmed.rfind("/"), trimmed.rfind("\\"))
    if cut < 0:
        return None
    if cut == 0:
        return trimmed[0]
    parent = trimmed[:cut]
    if WINDOWS_ROOT_PATTERN.match(parent):
        return parent + trimmed[cut]
    return parent


def validate_entry_name(name: str) -> str:
    """Validate a single new file or folder name."""
    candidate = name.strip()
    if not candidate:
        raise InvalidEntryName(
            reason="Name is empty.",
            hint="Enter a file or folder name such as 'notes.md'.",
        )
    if "/" in candidate or "\\" in candidate:
        raise InvalidEntryName(
            reason="Name contains a path separator.",
            hint="Create entries in the current directory only.",
        )
    if candidate in (".", ".."):
        raise InvalidEntryName(
            reason="Name refers to a directory link.",
            hint="Choose a name other than '.' or '..'.",
        )
    return candidate


def join_entry(directory: str, name: str) -> str:
    """Join a validated entry name onto a directory path."""
    entry = validate_entry_name(name)
    separator = _separator(directory)
    if directory.endswith(("/", "\\")):
        return f"{directory}{entry}"
    return f"{directory}{separator}{entry}"
