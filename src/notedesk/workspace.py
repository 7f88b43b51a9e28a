"""Workspace hub owning every piece of coordination state explicitly."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from notedesk.actions import Action, ActionBus
from notedesk.backend import Backend, BackendGateway, FileReference
from notedesk.config import ConfigOverrides, WorkspaceConfig, load_effective_config
from notedesk.errors import (
    BackendCallFailure,
    InvalidEntryName,
    NoDirectorySelected,
    UnsavedChangesConflict,
)
from notedesk.history import NavigationHistory
from notedesk.links import CrossReference
from notedesk.listing import DirectoryListing
from notedesk.logging import EventRecorder, JsonlEventLogger
from notedesk.paths import join_entry, parent_directory
from notedesk.search import PaletteCommand, PaletteMode, PanelTab, SearchCoordinator
from notedesk.session import DirtyTracker, EditSession, SaveResult
from notedesk.startup import StartupOrchestrator, StartupState

ABOUT_NOTICE = "notedesk: a desktop workspace for markdown notes."


class PromptKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass(slots=True, frozen=True)
class PendingPrompt:
    """Name prompt requested by a new-file or new-folder action."""

    kind: PromptKind
    directory: str


class Workspace:
    """Owns listing, history, editor session, search, actions and startup.

    Switching the open file or directory runs the dirty check first; a dirty
    session yields `conflict` instead of being replaced unless the caller
    passes `discard_changes=True`.
    """

    def __init__(
        self,
        config: WorkspaceConfig,
        gateway: BackendGateway,
        *,
        recorder: EventRecorder | None = None,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.recorder = recorder or gateway.recorder
        self.listing = DirectoryListing()
        self.history = NavigationHistory()
        self.editor = DirtyTracker(gateway)
        self.bus = ActionBus(recorder=self.recorder)
        self.search = SearchCoordinator(
            gateway,
            config.search,
            listing_entries=lambda: self.listing.entries,
            index_ready=lambda: self.startup.index_ready,
            open_path=self.open_file,
            recorder=self.recorder,
        )
        self.startup = self._new_orchestrator()
        self.sidebar_visible = True
        self.about_visible = False
        self.pending_prompt: PendingPrompt | None = None
        self.error: str | None = None
        self.conflict: UnsavedChangesConflict | None = None
        self._open_generation = 0
        self._subscribe_actions()
        self.search.set_commands(self.default_commands())

    @property
    def about_notice(self) -> str:
        return ABOUT_NOTICE

    def mount(self) -> StartupOrchestrator:
        """Replace the orchestrator; the previous instance is torn down."""
        self.startup.teardown()
        self.startup = self._new_orchestrator()
        return self.startup

    def unmount(self) -> None:
        self.startup.teardown()
        self.search.close_all()

    async def start(self) -> StartupState:
        state = await self.startup.start()
        self.search.listing_changed()
        return state

    async def load_directory(self, path: str, discard_changes: bool = False) -> bool:
        """Replace the listing with `path`; closes the open file on success."""
        if not self._check_replace(path, discard_changes):
            return False
        session, content = self.editor.session, self.editor.content
        if not await self._refresh_listing(path):
            return False
        self.startup.index_directory(path)
        self.search.listing_changed()
        # the listing stays; only the open file waits for confirmation
        if not self._recheck_replace(path, discard_changes, session, content):
            return False
        self.editor.close()
        self._open_generation += 1
        return True

    async def go_home(self, discard_changes: bool = False) -> bool:
        try:
            home = await self.gateway.resolve_home_directory()
        except BackendCallFailure as failure:
            self.error = failure.message
            return False
        return await self.load_directory(home, discard_changes)

    async def navigate_to_parent(self, discard_changes: bool = False) -> bool:
        current = self.listing.current_directory
        if current is None:
            self.error = NoDirectorySelected().message
            return False
        parent = parent_directory(current)
        if parent is None:
            return False
        return await self.load_directory(parent, discard_changes)

    async def select_entry(self, entry: FileReference, discard_changes: bool = False) -> bool:
        """Sidebar selection: enter a directory or open a file."""
        if entry.is_directory:
            return await self.load_directory(entry.path, discard_changes)
        return await self.open_file(entry.path, discard_changes)

    async def open_file(
        self, path: str, discard_changes: bool = False, record_history: bool = True
    ) -> bool:
        """Read `path` into a fresh clean session and push it onto the history."""
        if not self._check_replace(path, discard_changes):
            return False
        self._open_generation += 1
        generation = self._open_generation
        self.error = None
        session, previous = self.editor.session, self.editor.content
        try:
            content = await self.gateway.read_file(path)
        except BackendCallFailure as failure:
            if generation == self._open_generation and self._recheck_replace(
                path, discard_changes, session, previous
            ):
                self.editor.open(path, None)
                self.error = failure.message
            return False
        if generation != self._open_generation:
            return False
        if not self._recheck_replace(path, discard_changes, session, previous):
            return False
        self.editor.open(path, content)
        if record_history:
            self.history.push(path)
        return True

    def update_content(self, content: str) -> bool:
        return self.editor.edit(content)

    async def save(self) -> SaveResult:
        result = await self.editor.save()
        if result.ok:
            self.error = None
        return result

    def close_file(self, discard_changes: bool = False) -> bool:
        if self.editor.session is None:
            return False
        if not self._check_replace(Action.CLOSE_FILE.value, discard_changes):
            return False
        self._open_generation += 1
        self.editor.close()
        return True

    async def go_back(self, discard_changes: bool = False) -> str | None:
        if not self.history.can_go_back:
            return None
        target = self.history.entries[self.history.cursor - 1]
        if not self._check_replace(target, discard_changes):
            return None
        path = self.history.go_back()
        if path is None:
            return None
        opened = await self.open_file(path, discard_changes=True, record_history=False)
        if not opened and self.conflict is not None:
            # edited while the entry was loading; stay where the edits are
            self.history.go_forward()
            return None
        return path

    async def go_forward(self, discard_changes: bool = False) -> str | None:
        if not self.history.can_go_forward:
            return None
        target = self.history.entries[self.history.cursor + 1]
        if not self._check_replace(target, discard_changes):
            return None
        path = self.history.go_forward()
        if path is None:
            return None
        opened = await self.open_file(path, discard_changes=True, record_history=False)
        if not opened and self.conflict is not None:
            self.history.go_back()
            return None
        return path

    def cancel_prompt(self) -> None:
        self.pending_prompt = None

    async def submit_prompt(self, name: str) -> str | None:
        """Create the prompted file or folder; returns the created path."""
        prompt = self.pending_prompt
        if prompt is None:
            return None
        try:
            path = join_entry(prompt.directory, name)
        except InvalidEntryName as error:
            self.error = error.message
            return None
        self.pending_prompt = None
        try:
            if prompt.kind is PromptKind.FILE:
                await self.gateway.create_file(path)
            else:
                await self.gateway.create_directory(path)
        except BackendCallFailure as failure:
            self.error = failure.message
            return None
        self.error = None
        if self.listing.current_directory == prompt.directory:
            await self._refresh_listing(prompt.directory)
            self.search.listing_changed()
        if prompt.kind is PromptKind.FILE:
            await self.open_file(path)
        return path

    async def follow_link(
        self, link: CrossReference | str, discard_changes: bool = False
    ) -> str | None:
        """Resolve a cross reference and open it; an unresolved link is not an error."""
        directory = self.listing.current_directory
        if directory is None:
            self.error = NoDirectorySelected().message
            return None
        target = link.target if isinstance(link, CrossReference) else link
        try:
            resolved = await self.gateway.resolve_cross_reference(target, directory)
        except BackendCallFailure as failure:
            self.error = failure.message
            return None
        if resolved is None:
            return None
        if not await self.open_file(resolved, discard_changes):
            return None
        return resolved

    def default_commands(self) -> list[PaletteCommand]:
        return [
            PaletteCommand(
                id="file.new",
                label="New File",
                keywords=("create", "new", "file"),
                run=lambda: self.bus.dispatch(Action.NEW_FILE),
            ),
            PaletteCommand(
                id="file.new-folder",
                label="New Folder",
                keywords=("create", "new", "folder", "directory"),
                run=lambda: self.bus.dispatch(Action.NEW_FOLDER),
            ),
            PaletteCommand(
                id="file.save",
                label="Save File",
                keywords=("save", "write"),
                run=self._save_if_dirty,
            ),
            PaletteCommand(
                id="file.close",
                label="Close File",
                keywords=("close", "file"),
                run=lambda: self.bus.dispatch(Action.CLOSE_FILE),
            ),
            PaletteCommand(
                id="view.toggle-sidebar",
                label="Toggle Sidebar",
                keywords=("sidebar", "panel", "toggle"),
                run=lambda: self.bus.dispatch(Action.TOGGLE_SIDEBAR),
            ),
            PaletteCommand(
                id="view.search",
                label="Search in Files",
                keywords=("find", "content", "grep"),
                run=lambda: self.search.open_search_panel(PanelTab.CONTENT),
            ),
            PaletteCommand(
                id="help.about",
                label="About",
                keywords=("help", "version"),
                run=lambda: self.bus.dispatch(Action.ABOUT),
            ),
        ]

    def open_quick_open(self) -> None:
        self.search.open_palette(PaletteMode.FILES)

    def open_command_palette(self) -> None:
        self.search.open_palette(PaletteMode.COMMANDS)

    async def _save_if_dirty(self) -> SaveResult | None:
        if not self.editor.can_save:
            return None
        return await self.save()

    async def _refresh_listing(self, path: str) -> bool:
        token = self.listing.begin()
        try:
            entries = await self.gateway.list_directory(path)
        except BackendCallFailure as failure:
            self.listing.fail(token, failure.message)
            return False
        return self.listing.apply(token, path, entries)

    def _check_replace(self, requested: str, discard_changes: bool) -> bool:
        try:
            self.editor.check_replace(requested, discard_changes)
        except UnsavedChangesConflict as conflict:
            self.conflict = conflict
            self.recorder.record(
                "workspace.unsaved_changes",
                ok=False,
                error_code=conflict.code,
                arguments={"path": conflict.path},
            )
            return False
        self.conflict = None
        return True

    def _recheck_replace(
        self,
        requested: str,
        discard_changes: bool,
        session: EditSession | None,
        content: str | None,
    ) -> bool:
        """Dirty check after an await; a discard only covers the content it was given for."""
        if discard_changes and self.editor.session is session and self.editor.content == content:
            return True
        return self._check_replace(requested, False)

    def _new_orchestrator(self) -> StartupOrchestrator:
        return StartupOrchestrator(self.gateway, self.listing, recorder=self.recorder)

    def _subscribe_actions(self) -> None:
        self.bus.subscribe(Action.NEW_FILE, lambda: self._request_prompt(PromptKind.FILE))
        self.bus.subscribe(Action.NEW_FOLDER, lambda: self._request_prompt(PromptKind.FOLDER))
        self.bus.subscribe(Action.TOGGLE_SIDEBAR, self._toggle_sidebar)
        self.bus.subscribe(Action.CLOSE_FILE, self.close_file)
        self.bus.subscribe(Action.ABOUT, self._show_about)

    def _request_prompt(self, kind: PromptKind) -> None:
        directory = self.listing.current_directory
        if directory is None:
            self.error = NoDirectorySelected().message
            return
        self.pending_prompt = PendingPrompt(kind=kind, directory=directory)

    def _toggle_sidebar(self) -> None:
        self.sidebar_visible = not self.sidebar_visible

    def _show_about(self) -> None:
        self.about_visible = True


def create_workspace(
    backend: Backend,
    config_dir: Path | None = None,
    overrides: ConfigOverrides | None = None,
) -> Workspace:
    """Build a workspace from effective configuration around a backend."""
    config = load_effective_config(config_dir=config_dir, overrides=overrides)
    logger = JsonlEventLogger(config.events_path) if config.events.enabled else None
    recorder = EventRecorder(logger=logger)
    gateway = BackendGateway(backend, recorder=recorder)
    return Workspace(config, gateway, recorder=recorder)
