"""Startup sequencing against the backend with teardown safety.

Order: resolve home -> load directory -> initialize index -> background
indexing of the now-known directory -> Ready. Each step awaits the previous
step's result. Directory loading and index initialization are independent
backend calls; running the listing first guarantees the directory handed to
background indexing is known.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from notedesk.backend import BackendGateway
from notedesk.errors import BackendCallFailure
from notedesk.listing import DirectoryListing
from notedesk.logging import EventRecorder


class StartupPhase(str, Enum):
    IDLE = "idle"
    RESOLVING_HOME = "resolving_home"
    LOADING_DIRECTORY = "loading_directory"
    INITIALIZING_INDEX = "initializing_index"
    INDEXING_BACKGROUND = "indexing_background"
    READY = "ready"
    FAILED = "failed"


STARTABLE_PHASES = frozenset({StartupPhase.IDLE, StartupPhase.FAILED})
INDEX_READY_PHASES = frozenset({StartupPhase.INDEXING_BACKGROUND, StartupPhase.READY})


@dataclass(slots=True, frozen=True)
class StartupState:
    phase: StartupPhase
    reason: str | None = None


class IndexingState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class IndexingStatus:
    """Non-blocking background indexing status."""

    state: IndexingState = IndexingState.IDLE
    directory: str | None = None
    indexed_count: int | None = None
    message: str | None = None


class StartupOrchestrator:
    """One startup attempt per mounted instance.

    `teardown()` clears the liveness flag; continuations that resume after it
    change nothing and schedule nothing. Issued backend calls are never
    aborted, only their effects are suppressed.
    """

    def __init__(
        self,
        gateway: BackendGateway,
        listing: DirectoryListing,
        *,
        recorder: EventRecorder | None = None,
        on_change: Callable[[StartupState], None] | None = None,
    ) -> None:
        self._gateway = gateway
        self._listing = listing
        self._recorder = recorder or gateway.recorder
        self._on_change = on_change
        self._alive = True
        self._state = StartupState(StartupPhase.IDLE)
        self._indexing = IndexingStatus()
        self._background: set[asyncio.Task[None]] = set()
        self.home_directory: str | None = None
        self.index_location: str | None = None

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def state(self) -> StartupState:
        return self._state

    @property
    def phase(self) -> StartupPhase:
        return self._state.phase

    @property
    def indexing(self) -> IndexingStatus:
        return self._indexing

    @property
    def index_ready(self) -> bool:
        return self._alive and self._state.phase in INDEX_READY_PHASES

    async def start(self) -> StartupState:
        """Run the startup sequence; a no-op unless Idle or Failed."""
        if not self._alive or self._state.phase not in STARTABLE_PHASES:
            return self._state

        self._transition(StartupPhase.RESOLVING_HOME)
        try:
            home = await self._gateway.resolve_home_directory()
        except BackendCallFailure as failure:
            return self._fail(failure)
        if not self._alive:
            return self._state
        self.home_directory = home

        self._transition(StartupPhase.LOADING_DIRECTORY)
        token = self._listing.begin()
        try:
            entries = await self._gateway.list_directory(home)
        except BackendCallFailure as failure:
            if self._alive:
                self._listing.fail(token, failure.message)
            return self._fail(failure)
        if not self._alive:
            return self._state
        self._listing.apply(token, home, entries)

        self._transition(StartupPhase.INITIALIZING_INDEX)
        try:
            location = await self._gateway.initialize_search_index()
        except BackendCallFailure as failure:
            return self._fail(failure)
        if not self._alive:
            return self._state
        self.index_location = location

        self._transition(StartupPhase.INDEXING_BACKGROUND)
        self.index_directory(home)
        self._transition(StartupPhase.READY)
        return self._state

    def index_directory(self, directory: str) -> bool:
        """Fire-and-forget background indexing; requires an initialized index."""
        if not self.index_ready:
            return False
        self._indexing = IndexingStatus(state=IndexingState.RUNNING, directory=directory)
        task = asyncio.get_running_loop().create_task(self._index_in_background(directory))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return True

    def indexing_complete(self, count: int) -> None:
        """Push notification from the backend."""
        if not self._alive:
            return
        self._indexing = IndexingStatus(
            state=IndexingState.COMPLETE,
            directory=self._indexing.directory,
            indexed_count=count,
        )
        self._recorder.record("startup.indexing_complete", arguments={"count": count})

    def indexing_error(self, message: str) -> None:
        """Push notification from the backend."""
        if not self._alive:
            return
        self._indexing = IndexingStatus(
            state=IndexingState.ERROR,
            directory=self._indexing.directory,
            message=message,
        )
        self._recorder.record(
            "startup.indexing_error", ok=False, error_code="INDEXING_FAILED", arguments={}
        )

    def teardown(self) -> None:
        self._alive = False
        self._recorder.record("startup.teardown", arguments={"phase": self._state.phase.value})

    async def join(self) -> None:
        """Wait for outstanding background indexing tasks."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _index_in_background(self, directory: str) -> None:
        try:
            count = await self._gateway.index_directory(directory)
        except BackendCallFailure as failure:
            if self._alive and self._indexing.directory == directory:
                self.indexing_error(failure.message)
            return
        if self._alive and self._indexing.directory == directory:
            self.indexing_complete(count)

    def _transition(self, phase: StartupPhase, reason: str | None = None) -> None:
        self._state = StartupState(phase, reason)
        self._recorder.record("startup.transition", arguments={"phase": phase.value})
        if self._on_change is not None:
            self._on_change(self._state)

    def _fail(self, failure: BackendCallFailure) -> StartupState:
        if self._alive:
            self._transition(StartupPhase.FAILED, failure.message)
        return self._state
