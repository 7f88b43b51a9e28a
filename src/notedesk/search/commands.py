"""Static command list for the palette's command mode."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from notedesk.search.models import MatchCandidate
from notedesk.search.ranking import score

CommandHandler = Callable[[], Awaitable[object] | object]


@dataclass(slots=True, frozen=True)
class PaletteCommand:
    """One UI action reachable from the command palette."""

    id: str
    label: str
    keywords: tuple[str, ...]
    run: CommandHandler

    @property
    def search_text(self) -> str:
        return f"{self.label} {' '.join(self.keywords)}".strip()


def filter_commands(query: str, commands: Sequence[PaletteCommand]) -> list[MatchCandidate]:
    """Filter commands synchronously.

    A command is kept when the query matches its label plus keywords; kept
    commands are ordered by descending label score, ties in list order.
    An empty query keeps every command in list order.
    """
    if not query.strip():
        return [MatchCandidate(id=command.id, label=command.label, score=0.0) for command in commands]
    kept: list[MatchCandidate] = []
    for command in commands:
        if score(query, command.search_text) <= 0:
            continue
        kept.append(
            MatchCandidate(id=command.id, label=command.label, score=float(score(query, command.label)))
        )
    kept.sort(key=lambda candidate: -candidate.score)
    return kept
