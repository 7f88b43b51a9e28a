"""Owner of the current directory listing."""

from __future__ import annotations

from notedesk.backend import FileReference


class DirectoryListing:
    """Current directory and its entries, replaced wholesale on every load.

    Loads are tagged with a generation so a slow listing never overwrites a
    newer one.
    """

    def __init__(self) -> None:
        self.current_directory: str | None = None
        self.entries: tuple[FileReference, ...] = ()
        self.error: str | None = None
        self.loading = False
        self._generation = 0

    def begin(self) -> int:
        """Start a load and return its generation token."""
        self._generation += 1
        self.loading = True
        self.error = None
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def apply(self, token: int, directory: str, entries: list[FileReference]) -> bool:
        if not self.is_current(token):
            return False
        self.current_directory = directory
        self.entries = tuple(entries)
        self.loading = False
        self.error = None
        return True

    def fail(self, token: int, message: str) -> bool:
        """Record a load failure; the previous listing stays displayed."""
        if not self.is_current(token):
            return False
        self.loading = False
        self.error = message
        return True

    def find(self, path: str) -> FileReference | None:
        for entry in self.entries:
            if entry.path == path:
                return entry
        return None

    def files(self) -> list[FileReference]:
        return [entry for entry in self.entries if not entry.is_directory]
