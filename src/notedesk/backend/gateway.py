"""Single boundary between the coordination core and the native backend."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from notedesk.backend.contract import Backend
from notedesk.backend.models import (
    ContentMatch,
    FileMatch,
    FileReference,
    decode_content_matches,
    decode_file_matches,
    decode_file_references,
)
from notedesk.errors import BackendCallFailure
from notedesk.logging import EventRecorder

T = TypeVar("T")


class BackendGateway:
    """Calls backend commands, converts rejections and decodes payloads.

    Any exception raised by the backend becomes a `BackendCallFailure` whose
    message is the backend's message verbatim. Every call is recorded.
    """

    def __init__(self, backend: Backend, recorder: EventRecorder | None = None) -> None:
        self._backend = backend
        self._recorder = recorder or EventRecorder()

    @property
    def recorder(self) -> EventRecorder:
        return self._recorder

    async def resolve_home_directory(self) -> str:
        return await self._call(
            "resolve_home_directory",
            {},
            self._backend.resolve_home_directory,
            lambda payload: _require_path(payload, "resolve_home_directory"),
        )

    async def list_directory(self, path: str) -> list[FileReference]:
        return await self._call(
            "list_directory",
            {"path": path},
            lambda: self._backend.list_directory(path),
            _decode_listing,
        )

    async def read_file(self, path: str) -> str:
        return await self._call(
            "read_file",
            {"path": path},
            lambda: self._backend.read_file(path),
            _decode_text,
        )

    async def write_file(self, path: str, content: str) -> None:
        await self._call(
            "write_file",
            {"path": path, "content": content},
            lambda: self._backend.write_file(path, content),
            _ignore_payload,
        )

    async def create_file(self, path: str) -> None:
        await self._call(
            "create_file",
            {"path": path},
            lambda: self._backend.create_file(path),
            _ignore_payload,
        )

    async def create_directory(self, path: str) -> None:
        await self._call(
            "create_directory",
            {"path": path},
            lambda: self._backend.create_directory(path),
            _ignore_payload,
        )

    async def initialize_search_index(self) -> str:
        return await self._call(
            "initialize_search_index",
            {},
            self._backend.initialize_search_index,
            lambda payload: _require_path(payload, "initialize_search_index"),
        )

    async def index_directory(self, path: str) -> int:
        return await self._call(
            "index_directory",
            {"path": path},
            lambda: self._backend.index_directory(path),
            _decode_count,
        )

    async def search_file_names(self, query: str) -> list[FileMatch]:
        return await self._call(
            "search_file_names",
            {"query": query},
            lambda: self._backend.search_file_names(query),
            _decode_file_matches,
        )

    async def search_file_contents(self, query: str) -> list[ContentMatch]:
        return await self._call(
            "search_file_contents",
            {"query": query},
            lambda: self._backend.search_file_contents(query),
            _decode_content_matches,
        )

    async def resolve_cross_reference(self, link: str, current_directory: str) -> str | None:
        return await self._call(
            "resolve_cross_reference",
            {"link": link, "directory": current_directory},
            lambda: self._backend.resolve_cross_reference(link, current_directory),
            _decode_optional_path,
        )

    async def _call(
        self,
        command: str,
        arguments: dict[str, object],
        invoke: Callable[[], Awaitable[object]],
        decode: Callable[[object], T],
    ) -> T:
        name = f"backend.{command}"
        try:
            payload = await invoke()
        except BackendCallFailure as failure:
            self._recorder.record(name, ok=False, error_code=failure.code, arguments=arguments)
            raise
        except Exception as error:
            failure = BackendCallFailure(command=command, message=_error_message(error))
            self._recorder.record(name, ok=False, error_code=failure.code, arguments=arguments)
            raise failure from error
        try:
            result = decode(payload)
        except ValueError as error:
            failure = BackendCallFailure(command=command, message=str(error))
            self._recorder.record(name, ok=False, error_code=failure.code, arguments=arguments)
            raise failure from error
        self._recorder.record(name, arguments=arguments)
        return result


def _error_message(error: Exception) -> str:
    text = str(error)
    return text if text else type(error).__name__


def _require_path(payload: object, command: str) -> str:
    if not isinstance(payload, str) or not payload:
        raise ValueError(f"Malformed {command} response: expected a non-empty path.")
    return payload


def _decode_optional_path(payload: object) -> str | None:
    if payload is None or payload == "":
        return None
    if not isinstance(payload, str):
        raise ValueError("Malformed resolve_cross_reference response: expected a path or null.")
    return payload


def _decode_text(payload: object) -> str:
    if not isinstance(payload, str):
        raise ValueError("Malformed read_file response: expected text content.")
    return payload


def _decode_count(payload: object) -> int:
    if isinstance(payload, bool) or not isinstance(payload, int) or payload < 0:
        raise ValueError("Malformed index_directory response: expected a document count.")
    return payload


def _decode_listing(payload: object) -> list[FileReference]:
    entries = decode_file_references(payload)
    if entries is None:
        raise ValueError("Malformed list_directory response: expected a list of entries.")
    return entries


def _decode_file_matches(payload: object) -> list[FileMatch]:
    matches = decode_file_matches(payload)
    if matches is None:
        raise ValueError("Malformed search_file_names response: expected a list of matches.")
    return matches


def _decode_content_matches(payload: object) -> list[ContentMatch]:
    matches = decode_content_matches(payload)
    if matches is None:
        raise ValueError("Malformed search_file_contents response: expected a list of matches.")
    return matches


def _ignore_payload(payload: object) -> None:
    return None
