"""Error taxonomy for the coordination core."""

from __future__ import annotations


class CoreError(Exception):
    """Base for failures stored as component-local error state."""

    code = "CORE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BackendCallFailure(CoreError):
    """Raised when a backend command rejects or answers with a malformed payload."""

    code = "BACKEND_CALL_FAILED"

    def __init__(self, command: str, message: str) -> None:
        super().__init__(message)
        self.command = command


class NoDirectorySelected(CoreError):
    code = "NO_DIRECTORY_SELECTED"

    def __init__(self, message: str = "No directory selected") -> None:
        super().__init__(message)


class NoFileSelected(CoreError):
    code = "NO_FILE_SELECTED"

    def __init__(self, message: str = "No file selected") -> None:
        super().__init__(message)


class NoContentAvailable(CoreError):
    code = "NO_CONTENT_AVAILABLE"

    def __init__(self, message: str = "No content to save") -> None:
        super().__init__(message)


class IndexNotReady(CoreError):
    """Search attempted before the index acknowledged initialization."""

    code = "INDEX_NOT_READY"

    def __init__(self, message: str = "Search index is not ready yet") -> None:
        super().__init__(message)


class UnsavedChangesConflict(CoreError):
    """Raised when a dirty session would be closed or replaced without confirmation."""

    code = "UNSAVED_CHANGES"

    def __init__(self, path: str, requested: str) -> None:
        super().__init__(f"Unsaved changes in {path}")
        self.path = path
        self.requested = requested


class InvalidEntryName(CoreError):
    """Raised when a new file or folder name would escape the current directory."""

    code = "INVALID_ENTRY_NAME"

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint
