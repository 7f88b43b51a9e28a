"""Unsaved-edit tracking by snapshot comparison."""

from __future__ import annotations

from dataclasses import dataclass

from notedesk.backend import BackendGateway
from notedesk.errors import (
    BackendCallFailure,
    CoreError,
    NoContentAvailable,
    NoFileSelected,
    UnsavedChangesConflict,
)


@dataclass(slots=True)
class EditSession:
    """Live editor content against the last persisted snapshot of one file."""

    file_path: str
    live_content: str | None
    last_saved_snapshot: str | None

    @property
    def is_dirty(self) -> bool:
        return self.live_content != self.last_saved_snapshot


@dataclass(slots=True, frozen=True)
class SaveResult:
    ok: bool
    error: CoreError | None = None


class DirtyTracker:
    """Owns the single edit session and its save operation.

    Dirty state is content equality, not edit history: reverting to the saved
    text makes the session clean again. Saving trusts the in-memory content
    and never re-reads the file first.
    """

    def __init__(self, gateway: BackendGateway) -> None:
        self._gateway = gateway
        self._session: EditSession | None = None
        self.error: str | None = None
        self.saving = False

    @property
    def session(self) -> EditSession | None:
        return self._session

    @property
    def file_path(self) -> str | None:
        return self._session.file_path if self._session is not None else None

    @property
    def content(self) -> str | None:
        return self._session.live_content if self._session is not None else None

    @property
    def is_dirty(self) -> bool:
        return self._session is not None and self._session.is_dirty

    @property
    def can_save(self) -> bool:
        """False while a write is in flight or when there is nothing to write."""
        if self.saving or self._session is None:
            return False
        return self.is_dirty and self._session.live_content is not None

    def open(self, path: str, content: str | None) -> EditSession:
        """Replace any session with a clean one for `path`."""
        self._session = EditSession(
            file_path=path, live_content=content, last_saved_snapshot=content
        )
        self.error = None
        return self._session

    def edit(self, content: str) -> bool:
        """Apply a change notification from the editor; returns the new dirty flag."""
        if self._session is None:
            return False
        self._session.live_content = content
        return self._session.is_dirty

    def close(self) -> None:
        self._session = None
        self.error = None

    def check_replace(self, requested: str, discard_changes: bool = False) -> None:
        """Raise UnsavedChangesConflict unless the session may be closed or replaced."""
        if discard_changes or not self.is_dirty or self._session is None:
            return
        raise UnsavedChangesConflict(path=self._session.file_path, requested=requested)

    async def save(self) -> SaveResult:
        """Write live content; the snapshot advances only when the write succeeds."""
        session = self._session
        if session is None:
            return self._failed(NoFileSelected())
        if session.live_content is None:
            return self._failed(NoContentAvailable())
        content = session.live_content
        self.saving = True
        try:
            await self._gateway.write_file(session.file_path, content)
        except BackendCallFailure as failure:
            if self._session is session:
                self.error = failure.message
            return SaveResult(ok=False, error=failure)
        finally:
            self.saving = False
        if self._session is session:
            session.last_saved_snapshot = content
            self.error = None
        return SaveResult(ok=True)

    def _failed(self, error: CoreError) -> SaveResult:
        self.error = error.message
        return SaveResult(ok=False, error=error)
