from __future__ import annotations

import asyncio

from fakes import drain, wait_until
from notedesk.errors import BackendCallFailure
from notedesk.logging import EventRecorder
from notedesk.search import (
    EmptyQueryPolicy,
    MatchCandidate,
    SearchKind,
    SearchRequest,
    SearchSurface,
    SurfaceState,
    SurfaceStatus,
)


class ScriptedFetch:
    """Fetch double: per-query gates, per-query failures, recorded requests."""

    def __init__(self) -> None:
        self.requests: list[SearchRequest] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.failures: dict[str, str] = {}

    def gate(self, query: str) -> asyncio.Event:
        self.gates[query] = asyncio.Event()
        return self.gates[query]

    async def __call__(self, request: SearchRequest) -> list[MatchCandidate]:
        self.requests.append(request)
        gate = self.gates.get(request.query)
        if gate is not None:
            await gate.wait()
        if request.query in self.failures:
            raise BackendCallFailure("search_file_names", self.failures[request.query])
        return [MatchCandidate(id=f"/notes/{request.query}.md", label=request.query, score=1.0)]


def _surface(
    fetch: ScriptedFetch,
    recorder: EventRecorder | None = None,
    *,
    empty_policy: EmptyQueryPolicy = EmptyQueryPolicy.PLACEHOLDER,
    index_ready: bool = True,
) -> SearchSurface:
    return SearchSurface(
        "test.files",
        SearchKind.FILES,
        fetch,
        debounce_seconds=0.002,
        empty_policy=empty_policy,
        local_candidates=lambda: [MatchCandidate(id="/notes/local.md", label="local.md", score=0.0)],
        index_ready=lambda: index_ready,
        recorder=recorder,
    )


def test_keystrokes_within_debounce_window_issue_one_request() -> None:
    async def scenario() -> None:
        fetch = ScriptedFetch()
        surface = _surface(fetch)
        for query in ("n", "no", "not", "note"):
            surface.update_query(query)
        assert surface.timer_pending
        await surface.settle()

        assert [request.query for request in fetch.requests] == ["note"]
        assert fetch.requests[0].generation == surface.state.generation
        assert [candidate.id for candidate in surface.state.results] == ["/notes/note.md"]
        assert surface.state.status is SurfaceStatus.LOADED

    asyncio.run(scenario())


def test_out_of_order_response_is_discarded() -> None:
    async def scenario() -> None:
        recorder = EventRecorder()
        fetch = ScriptedFetch()
        slow = fetch.gate("a")
        fast = fetch.gate("ab")
        surface = _surface(fetch, recorder)

        surface.update_query("a")
        await wait_until(lambda: len(fetch.requests) == 1)
        surface.update_query("ab")
        await wait_until(lambda: len(fetch.requests) == 2)

        fast.set()
        await wait_until(lambda: surface.state.status is SurfaceStatus.LOADED)
        assert [candidate.label for candidate in surface.state.results] == ["ab"]

        slow.set()
        await surface.settle()

        assert [candidate.label for candidate in surface.state.results] == ["ab"]
        assert surface.state.error is None
        discarded = recorder.recent("search.stale_discarded")
        assert len(discarded) == 1
        assert discarded[0].discarded is True
        assert discarded[0].metadata["generation"] == fetch.requests[0].generation

    asyncio.run(scenario())


def test_stale_failure_is_discarded_silently() -> None:
    async def scenario() -> None:
        fetch = ScriptedFetch()
        slow = fetch.gate("a")
        fetch.failures["a"] = "index locked"
        surface = _surface(fetch)

        surface.update_query("a")
        await wait_until(lambda: len(fetch.requests) == 1)
        surface.update_query("ab")
        await wait_until(lambda: surface.state.status is SurfaceStatus.LOADED)
        slow.set()
        await surface.settle()

        assert surface.state.error is None
        assert [candidate.label for candidate in surface.state.results] == ["ab"]

    asyncio.run(scenario())


def test_empty_query_uses_local_listing_without_backend_call() -> None:
    async def scenario() -> None:
        fetch = ScriptedFetch()
        surface = _surface(fetch, empty_policy=EmptyQueryPolicy.LOCAL_LISTING)

        surface.update_query("not")
        surface.update_query("   ")
        assert not surface.timer_pending
        await surface.settle()

        assert fetch.requests == []
        assert [candidate.id for candidate in surface.state.results] == ["/notes/local.md"]
        assert surface.state.status is SurfaceStatus.LOADED

    asyncio.run(scenario())


def test_empty_query_shows_placeholder_for_search_panel() -> None:
    async def scenario() -> None:
        fetch = ScriptedFetch()
        surface = _surface(fetch)

        surface.update_query("")
        await surface.settle()

        assert fetch.requests == []
        assert surface.state.results == []
        assert surface.state.status is SurfaceStatus.PLACEHOLDER

    asyncio.run(scenario())


def test_backend_failure_keeps_results_until_next_success() -> None:
    async def scenario() -> None:
        fetch = ScriptedFetch()
        fetch.failures["broken"] = "index unavailable"
        surface = _surface(fetch)

        surface.update_query("first")
        await surface.settle()
        surface.update_query("broken")
        await surface.settle()

        assert surface.state.error == "index unavailable"
        assert [candidate.label for candidate in surface.state.results] == ["first"]

        surface.update_query("second")
        await surface.settle()

        assert surface.state.error is None
        assert [candidate.label for candidate in surface.state.results] == ["second"]

    asyncio.run(scenario())


def test_search_before_index_ready_is_not_an_error() -> None:
    async def scenario() -> None:
        recorder = EventRecorder()
        fetch = ScriptedFetch()
        surface = _surface(fetch, recorder, index_ready=False)

        surface.update_query("draft")
        await surface.settle()

        assert fetch.requests == []
        assert surface.state.status is SurfaceStatus.INDEX_NOT_READY
        assert surface.state.results == []
        assert surface.state.error is None
        assert len(recorder.recent("search.index_not_ready")) == 1

    asyncio.run(scenario())


def test_reset_makes_in_flight_response_stale() -> None:
    async def scenario() -> None:
        fetch = ScriptedFetch()
        gate = fetch.gate("draft")
        surface = _surface(fetch)

        surface.update_query("draft")
        await wait_until(lambda: len(fetch.requests) == 1)
        surface.reset()
        gate.set()
        await surface.settle()
        await drain()

        assert surface.state.results == []
        assert surface.state.status is SurfaceStatus.IDLE

    asyncio.run(scenario())


def test_selection_cursor_resets_on_identity_change_and_wraps() -> None:
    state = SurfaceState()
    first = [
        MatchCandidate(id="/a.md", label="a.md", score=2.0),
        MatchCandidate(id="/b.md", label="b.md", score=1.0),
        MatchCandidate(id="/c.md", label="c.md", score=0.5),
    ]
    state.replace_results(first)
    state.move_selection(-1)
    assert state.selected_index == 2

    state.move_selection(1)
    assert state.selected_index == 0
    state.move_selection(2)

    state.replace_results(list(reversed(first)))
    assert state.selected_index == 2

    state.replace_results(first[:2] + [MatchCandidate(id="/d.md", label="d.md", score=0.1)])
    assert state.selected_index == 0
    assert state.selected() == first[0]


def test_two_keystrokes_in_window_send_only_the_latest_query() -> None:
    async def scenario() -> None:
        fetch = ScriptedFetch()
        surface = _surface(fetch)

        surface.update_query("a")
        surface.update_query("ab")
        await surface.settle()

        assert [request.query for request in fetch.requests] == ["ab"]

    asyncio.run(scenario())
