"""Per-surface search state: debounce, generation tagging and stale-result discard."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from notedesk.errors import BackendCallFailure, IndexNotReady
from notedesk.logging import EventRecorder
from notedesk.search.commands import PaletteCommand, filter_commands
from notedesk.search.models import (
    MatchCandidate,
    SearchKind,
    SearchOutcome,
    SearchRequest,
    SurfaceStatus,
)

Fetch = Callable[[SearchRequest], Awaitable[list[MatchCandidate]]]


class EmptyQueryPolicy(str, Enum):
    """What a backend surface shows for an empty or whitespace query."""

    LOCAL_LISTING = "local_listing"
    PLACEHOLDER = "placeholder"


@dataclass(slots=True)
class SurfaceState:
    """Displayed state of one search surface."""

    query: str = ""
    generation: int = 0
    results: list[MatchCandidate] = field(default_factory=list)
    status: SurfaceStatus = SurfaceStatus.IDLE
    error: str | None = None
    selected_index: int = 0

    def replace_results(self, results: list[MatchCandidate]) -> None:
        """Overwrite results; the cursor returns to 0 if size or identity set changed."""
        previous_ids = {candidate.id for candidate in self.results}
        next_ids = {candidate.id for candidate in results}
        if len(results) != len(self.results) or previous_ids != next_ids:
            self.selected_index = 0
        self.results = list(results)

    def move_selection(self, delta: int) -> None:
        if not self.results:
            self.selected_index = 0
            return
        self.selected_index = (self.selected_index + delta) % len(self.results)

    def selected(self) -> MatchCandidate | None:
        if not self.results:
            return None
        return self.results[min(self.selected_index, len(self.results) - 1)]

    def clear(self) -> None:
        self.generation += 1
        self.query = ""
        self.results = []
        self.status = SurfaceStatus.IDLE
        self.error = None
        self.selected_index = 0


class SearchSurface:
    """Backend-backed surface.

    Every keystroke bumps the generation and restarts the debounce timer.
    A fired request carries the generation current at fire time; a response
    is applied only if that generation is still current.
    """

    def __init__(
        self,
        name: str,
        kind: SearchKind,
        fetch: Fetch,
        *,
        debounce_seconds: float,
        empty_policy: EmptyQueryPolicy = EmptyQueryPolicy.PLACEHOLDER,
        local_candidates: Callable[[], list[MatchCandidate]] | None = None,
        index_ready: Callable[[], bool] | None = None,
        recorder: EventRecorder | None = None,
    ) -> None:
        self._name = name
        self._kind = kind
        self._fetch = fetch
        self._debounce_seconds = debounce_seconds
        self._empty_policy = empty_policy
        self._local_candidates = local_candidates or (lambda: [])
        self._index_ready = index_ready or (lambda: True)
        self._recorder = recorder or EventRecorder()
        self._state = SurfaceState()
        self._timer: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[object]] = set()

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> SearchKind:
        return self._kind

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def update_query(self, query: str) -> None:
        """Record a keystroke. Must be called from the running event loop."""
        self._state.generation += 1
        self._state.query = query
        self._cancel_timer()
        if not query.strip():
            self._show_empty_query()
            return
        self._state.status = SurfaceStatus.PENDING
        timer = asyncio.get_running_loop().create_task(self._debounced())
        self._timer = timer
        self._track(timer)

    def refresh_empty_query(self) -> None:
        """Re-derive the empty-query view, e.g. after the directory listing changed."""
        if not self._state.query.strip() and self._state.status is not SurfaceStatus.IDLE:
            self._show_empty_query()

    def reset(self) -> None:
        """Clear query and results; in-flight responses become stale."""
        self._cancel_timer()
        self._state.clear()

    async def run(self, request: SearchRequest) -> SearchOutcome:
        """Issue one backend request and apply its response if still current."""
        if not self._index_ready():
            if request.generation == self._state.generation:
                self._state.replace_results([])
                self._state.status = SurfaceStatus.INDEX_NOT_READY
                self._state.error = None
            self._recorder.record(
                "search.index_not_ready",
                ok=False,
                error_code=IndexNotReady.code,
                arguments={"surface": self._name, "generation": request.generation},
            )
            return SearchOutcome.INDEX_NOT_READY
        try:
            candidates = await self._fetch(request)
        except BackendCallFailure as failure:
            if request.generation != self._state.generation:
                self._record_discard(request)
                return SearchOutcome.STALE_DISCARDED
            self._state.error = failure.message
            self._state.status = SurfaceStatus.LOADED
            return SearchOutcome.FAILED
        if request.generation != self._state.generation:
            self._record_discard(request)
            return SearchOutcome.STALE_DISCARDED
        self._state.replace_results(candidates)
        self._state.error = None
        self._state.status = SurfaceStatus.LOADED
        return SearchOutcome.APPLIED

    async def settle(self) -> None:
        """Wait until no debounce timer or request of this surface is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _debounced(self) -> None:
        await asyncio.sleep(self._debounce_seconds)
        if self._timer is asyncio.current_task():
            self._timer = None
        request = SearchRequest(
            query=self._state.query,
            generation=self._state.generation,
            surface=self._kind,
        )
        await self.run(request)

    def _show_empty_query(self) -> None:
        self._state.error = None
        if self._empty_policy is EmptyQueryPolicy.LOCAL_LISTING:
            self._state.replace_results(self._local_candidates())
            self._state.status = SurfaceStatus.LOADED
            return
        self._state.replace_results([])
        self._state.status = SurfaceStatus.PLACEHOLDER

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _track(self, task: asyncio.Task[None]) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _record_discard(self, request: SearchRequest) -> None:
        self._recorder.record(
            "search.stale_discarded",
            discarded=True,
            arguments={"surface": self._name, "generation": request.generation},
        )


class CommandSurface:
    """Synchronous command filtering; never calls the backend and needs no debounce."""

    def __init__(self, commands: Sequence[PaletteCommand] = ()) -> None:
        self._commands: tuple[PaletteCommand, ...] = tuple(commands)
        self._state = SurfaceState()

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def commands(self) -> tuple[PaletteCommand, ...]:
        return self._commands

    def set_commands(self, commands: Sequence[PaletteCommand]) -> None:
        self._commands = tuple(commands)

    def update_query(self, query: str) -> None:
        self._state.generation += 1
        self._state.query = query
        self._state.replace_results(filter_commands(query, self._commands))
        self._state.status = SurfaceStatus.LOADED

    def reset(self) -> None:
        self._state.clear()

    def command(self, command_id: str) -> PaletteCommand | None:
        for command in self._commands:
            if command.id == command_id:
                return command
        return None
