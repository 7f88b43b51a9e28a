"""Deterministic subsequence scoring for quick-open and command filtering."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from notedesk.search.models import MatchCandidate

T = TypeVar("T")


def _fold(text: str) -> list[str]:
    # Fold per character so indices and lengths stay in target code points.
    return [char.casefold() for char in text]


def score(query: str, target: str) -> int:
    """Score `target` for `query`; 0 unless every query character appears in order.

    Each matched character adds `len(target) - index`, so earlier matches weigh
    more. An empty query always scores 0.
    """
    folded_query = _fold(query)
    folded_target = _fold(target)
    length = len(folded_target)
    total = 0
    query_index = 0
    for index, char in enumerate(folded_target):
        if query_index >= len(folded_query):
            break
        if char == folded_query[query_index]:
            total += length - index
            query_index += 1
    if query_index != len(folded_query):
        return 0
    return total


def match_positions(query: str, text: str) -> list[int]:
    """Return indices of the greedy subsequence match used for highlighting."""
    if not query:
        return []
    folded_query = _fold(query)
    positions: list[int] = []
    query_index = 0
    for index, char in enumerate(_fold(text)):
        if query_index < len(folded_query) and char == folded_query[query_index]:
            positions.append(index)
            query_index += 1
    return positions


def rank(
    query: str,
    items: Iterable[T],
    label: Callable[[T], str],
    identity: Callable[[T], str],
) -> list[MatchCandidate]:
    """Score items by label, drop non-matches and stable-sort by descending score."""
    scored: list[MatchCandidate] = []
    for item in items:
        value = score(query, label(item))
        if value <= 0:
            continue
        scored.append(MatchCandidate(id=identity(item), label=label(item), score=float(value)))
    scored.sort(key=lambda candidate: -candidate.score)
    return scored
