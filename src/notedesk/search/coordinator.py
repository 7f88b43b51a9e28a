"""Quick-open palette and search panel coordination."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum

from notedesk.backend import BackendGateway, FileReference, basename
from notedesk.config import SearchConfig
from notedesk.logging import EventRecorder
from notedesk.search.commands import PaletteCommand
from notedesk.search.models import MatchCandidate, SearchKind, SearchRequest
from notedesk.search.surface import (
    CommandSurface,
    EmptyQueryPolicy,
    SearchSurface,
    SurfaceState,
)

OpenPath = Callable[[str], Awaitable[object]]


class PaletteMode(str, Enum):
    FILES = "files"
    COMMANDS = "commands"


class PanelTab(str, Enum):
    FILES = "files"
    CONTENT = "content"


class CommandPalette:
    """Quick-open overlay: backend file lookup or local command filtering."""

    def __init__(self, files: SearchSurface, commands: CommandSurface, open_path: OpenPath) -> None:
        self._files = files
        self._commands = commands
        self._open_path = open_path
        self.is_open = False
        self.mode = PaletteMode.FILES

    @property
    def files(self) -> SearchSurface:
        return self._files

    @property
    def commands(self) -> CommandSurface:
        return self._commands

    @property
    def state(self) -> SurfaceState:
        if self.mode is PaletteMode.FILES:
            return self._files.state
        return self._commands.state

    def open(self, mode: PaletteMode) -> None:
        self._files.reset()
        self._commands.reset()
        self.is_open = True
        self.mode = mode
        self.type("")

    def close(self) -> None:
        self.is_open = False
        self._files.reset()
        self._commands.reset()

    def type(self, query: str) -> None:
        if not self.is_open:
            return
        if self.mode is PaletteMode.FILES:
            self._files.update_query(query)
        else:
            self._commands.update_query(query)

    def move_selection(self, delta: int) -> None:
        self.state.move_selection(delta)

    async def select(self, index: int | None = None) -> MatchCandidate | None:
        """Close and clear the palette, then dispatch the chosen result."""
        if not self.is_open:
            return None
        candidate = _pick(self.state, index)
        if candidate is None:
            return None
        mode = self.mode
        self.close()
        if mode is PaletteMode.FILES:
            await self._open_path(candidate.id)
            return candidate
        command = self._commands.command(candidate.id)
        if command is not None:
            outcome = command.run()
            if inspect.isawaitable(outcome):
                await outcome
        return candidate


class SearchPanel:
    """Search overlay with independent `files` and `content` tabs sharing one query."""

    def __init__(self, surfaces: dict[PanelTab, SearchSurface], open_path: OpenPath) -> None:
        self._surfaces = surfaces
        self._open_path = open_path
        self.is_open = False
        self.active_tab = PanelTab.FILES
        self.query = ""

    def surface(self, tab: PanelTab | None = None) -> SearchSurface:
        return self._surfaces[tab or self.active_tab]

    @property
    def state(self) -> SurfaceState:
        return self.surface().state

    def open(self, tab: PanelTab | None = None) -> None:
        for surface in self._surfaces.values():
            surface.reset()
        self.is_open = True
        if tab is not None:
            self.active_tab = tab
        self.query = ""
        self.surface().update_query("")

    def close(self) -> None:
        self.is_open = False
        self.query = ""
        for surface in self._surfaces.values():
            surface.reset()

    def set_tab(self, tab: PanelTab) -> None:
        self.active_tab = tab
        if self.is_open:
            self.surface().update_query(self.query)

    def type(self, query: str) -> None:
        if not self.is_open:
            return
        self.query = query
        self.surface().update_query(query)

    def move_selection(self, delta: int) -> None:
        self.state.move_selection(delta)

    async def select(self, index: int | None = None) -> MatchCandidate | None:
        """Close and clear the panel, then open the chosen file."""
        if not self.is_open:
            return None
        candidate = _pick(self.state, index)
        if candidate is None:
            return None
        self.close()
        await self._open_path(candidate.id)
        return candidate


class SearchCoordinator:
    """Owns the palette and the search panel and wires them to the backend."""

    def __init__(
        self,
        gateway: BackendGateway,
        config: SearchConfig,
        *,
        listing_entries: Callable[[], Sequence[FileReference]],
        index_ready: Callable[[], bool],
        open_path: OpenPath,
        recorder: EventRecorder | None = None,
        commands: Sequence[PaletteCommand] = (),
    ) -> None:
        self._gateway = gateway
        self._config = config
        self._listing_entries = listing_entries
        recorder = recorder or gateway.recorder
        self.palette = CommandPalette(
            files=SearchSurface(
                "palette.files",
                SearchKind.FILES,
                self._fetch_file_names,
                debounce_seconds=config.quick_open_debounce_seconds,
                empty_policy=EmptyQueryPolicy.LOCAL_LISTING,
                local_candidates=self.local_file_candidates,
                index_ready=index_ready,
                recorder=recorder,
            ),
            commands=CommandSurface(commands),
            open_path=open_path,
        )
        self.panel = SearchPanel(
            surfaces={
                PanelTab.FILES: SearchSurface(
                    "panel.files",
                    SearchKind.FILES,
                    self._fetch_file_names,
                    debounce_seconds=config.search_debounce_seconds,
                    index_ready=index_ready,
                    recorder=recorder,
                ),
                PanelTab.CONTENT: SearchSurface(
                    "panel.content",
                    SearchKind.CONTENT,
                    self._fetch_file_contents,
                    debounce_seconds=config.search_debounce_seconds,
                    index_ready=index_ready,
                    recorder=recorder,
                ),
            },
            open_path=open_path,
        )

    def set_commands(self, commands: Sequence[PaletteCommand]) -> None:
        self.palette.commands.set_commands(commands)

    def open_palette(self, mode: PaletteMode) -> None:
        self.panel.close()
        self.palette.open(mode)

    def open_search_panel(self, tab: PanelTab | None = None) -> None:
        self.palette.close()
        self.panel.open(tab)

    def close_all(self) -> None:
        self.palette.close()
        self.panel.close()

    def listing_changed(self) -> None:
        """Refresh the palette's empty-query view from the new listing."""
        if self.palette.is_open and self.palette.mode is PaletteMode.FILES:
            self.palette.files.refresh_empty_query()

    def local_file_candidates(self) -> list[MatchCandidate]:
        """Non-directory entries of the loaded listing, listing order, score 0."""
        output: list[MatchCandidate] = []
        for entry in self._listing_entries():
            if entry.is_directory:
                continue
            output.append(MatchCandidate(id=entry.path, label=entry.name, score=0.0))
            if len(output) >= self._config.empty_query_file_limit:
                break
        return output

    async def settle(self) -> None:
        await self.palette.files.settle()
        await self.panel.surface(PanelTab.FILES).settle()
        await self.panel.surface(PanelTab.CONTENT).settle()

    async def _fetch_file_names(self, request: SearchRequest) -> list[MatchCandidate]:
        matches = await self._gateway.search_file_names(request.query)
        return [
            MatchCandidate(id=match.path, label=match.title or basename(match.path), score=match.score)
            for match in matches[: self._config.max_results]
        ]

    async def _fetch_file_contents(self, request: SearchRequest) -> list[MatchCandidate]:
        matches = await self._gateway.search_file_contents(request.query)
        return [
            MatchCandidate(
                id=match.path,
                label=match.title or basename(match.path),
                score=float(match.match_count),
                detail=match.snippet,
                match_count=match.match_count,
            )
            for match in matches[: self._config.max_results]
        ]


def _pick(state: SurfaceState, index: int | None) -> MatchCandidate | None:
    if index is None:
        return state.selected()
    if 0 <= index < len(state.results):
        return state.results[index]
    return None
