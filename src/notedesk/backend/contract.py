"""Backend command contract consumed by the coordination core."""

from __future__ import annotations

from typing import Protocol


class Backend(Protocol):
    """Native, out-of-process command surface.

    Every command is asynchronous and may fail by raising. Results use the
    native JSON wire shapes; `BackendGateway` validates and decodes them.
    """

    async def resolve_home_directory(self) -> object:
        """Absolute path of the user's home directory."""

    async def list_directory(self, path: str) -> object:
        """Ordered entries `{name, path, is_directory, size, modified}`."""

    async def read_file(self, path: str) -> object:
        """Full text content."""

    async def write_file(self, path: str, content: str) -> object: ...

    async def create_file(self, path: str) -> object: ...

    async def create_directory(self, path: str) -> object: ...

    async def initialize_search_index(self) -> object:
        """Index location identifier."""

    async def index_directory(self, path: str) -> object:
        """Count of indexed documents."""

    async def search_file_names(self, query: str) -> object:
        """Ranked `{path, title, score}` rows."""

    async def search_file_contents(self, query: str) -> object:
        """Ranked `{path, title, snippet, matches}` rows."""

    async def resolve_cross_reference(self, link: str, current_directory: str) -> object:
        """Resolved path, or None when the link has no target."""
