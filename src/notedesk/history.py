"""Branchable navigation history for visited files."""

from __future__ import annotations


class NavigationHistory:
    """Browser-style back/forward stack.

    Pushing after going back discards the forward branch. Entries are only
    ever removed by that truncation or by `clear()`.
    """

    def __init__(self) -> None:
        self._entries: list[str] = []
        self._cursor = -1

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> str | None:
        if self._cursor < 0:
            return None
        return self._entries[self._cursor]

    @property
    def can_go_back(self) -> bool:
        return self._cursor > 0

    @property
    def can_go_forward(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def push(self, path: str) -> None:
        """Visit `path`; a repeat of the current entry is ignored."""
        if self.current == path:
            return
        del self._entries[self._cursor + 1 :]
        self._entries.append(path)
        self._cursor = len(self._entries) - 1

    def go_back(self) -> str | None:
        if not self.can_go_back:
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def go_forward(self) -> str | None:
        if not self.can_go_forward:
            return None
        self._cursor += 1
        return self._entries[self._cursor]

    def clear(self) -> None:
        self._entries = []
        self._cursor = -1
