"""Typed models shared by the search surfaces."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SearchKind(str, Enum):
    """Which result family a request targets."""

    FILES = "files"
    CONTENT = "content"
    COMMANDS = "commands"


class SurfaceStatus(str, Enum):
    """What a surface is currently showing."""

    IDLE = "idle"
    PLACEHOLDER = "placeholder"
    PENDING = "pending"
    LOADED = "loaded"
    INDEX_NOT_READY = "index_not_ready"


class SearchOutcome(str, Enum):
    """How a completed request affected its surface."""

    APPLIED = "applied"
    STALE_DISCARDED = "stale_discarded"
    FAILED = "failed"
    INDEX_NOT_READY = "index_not_ready"


@dataclass(slots=True, frozen=True)
class MatchCandidate:
    """Ranked result row; `id` is a path for files/content and a command id for commands."""

    id: str
    label: str
    score: float
    detail: str | None = None
    match_count: int | None = None


@dataclass(slots=True, frozen=True)
class SearchRequest:
    """Backend search request tagged with the generation captured at fire time."""

    query: str
    generation: int
    surface: SearchKind
