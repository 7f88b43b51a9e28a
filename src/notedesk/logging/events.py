"""Structured JSONL coordination event log."""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

RECENT_EVENTS_LIMIT = 200


@dataclass(slots=True, frozen=True)
class CoordinationEvent:
    """Sanitized record of one backend call or coordination decision."""

    timestamp: str
    sequence: int
    name: str
    ok: bool
    discarded: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Sanitize arguments so note contents and typed queries never reach the log."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments.keys()):
        value = arguments[key]
        if key in {"path", "directory", "surface", "phase", "action"} and isinstance(value, str):
            sanitized[key] = value
            continue
        if key in {"generation", "count", "limit"} and isinstance(value, int):
            sanitized[key] = value
            continue
        if key in {"query", "content", "link"} and isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, (int, float, bool)) or value is None:
            sanitized[key] = value
            continue
        if isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, list):
            sanitized[f"{key}_type"] = "list"
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, dict):
            sanitized[f"{key}_type"] = "dict"
            sanitized[f"{key}_keys"] = sorted(str(k) for k in value.keys())
            continue
        sanitized[f"{key}_type"] = type(value).__name__
    return sanitized


class JsonlEventLogger:
    """Coordination event log, one JSON object per line.

    Lines that do not decode are skipped on read, so a torn final write from
    a crashed session never hides the events before it.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: CoordinationEvent) -> None:
        line = json.dumps(asdict(event), sort_keys=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")

    def read(
        self, since: str | None = None, limit: int = 50, name: str | None = None
    ) -> list[dict[str, object]]:
        """Return the newest `limit` events, oldest first.

        `since` is an inclusive timestamp bound. `name` selects one event name
        or, given a bare family such as "search", every "search.*" event.
        """
        if limit < 1 or not self._path.exists():
            return []
        tail: deque[dict[str, object]] = deque(maxlen=limit)
        for event in self._decoded():
            if since is not None and str(event.get("timestamp", "")) < since:
                continue
            if name is not None and not _name_matches(str(event.get("name", "")), name):
                continue
            tail.append(event)
        return list(tail)

    def _decoded(self) -> Iterator[dict[str, object]]:
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                try:
                    event = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(event, dict):
                    yield event


def _name_matches(event_name: str, wanted: str) -> bool:
    return event_name == wanted or event_name.startswith(f"{wanted}.")


class EventRecorder:
    """Numbers events, keeps a bounded tail in memory and forwards to an optional log."""

    def __init__(self, logger: JsonlEventLogger | None = None) -> None:
        self._logger = logger
        self._sequence = 0
        self._recent: deque[CoordinationEvent] = deque(maxlen=RECENT_EVENTS_LIMIT)

    @property
    def logger(self) -> JsonlEventLogger | None:
        return self._logger

    def record(
        self,
        name: str,
        *,
        ok: bool = True,
        discarded: bool = False,
        error_code: str | None = None,
        arguments: dict[str, object] | None = None,
    ) -> CoordinationEvent:
        """Record one event and return it."""
        self._sequence += 1
        event = CoordinationEvent(
            timestamp=utc_timestamp(),
            sequence=self._sequence,
            name=name,
            ok=ok,
            discarded=discarded,
            error_code=error_code,
            metadata=sanitize_arguments(arguments or {}),
        )
        self._recent.append(event)
        if self._logger is not None:
            self._logger.append(event)
        return event

    def recent(self, name: str | None = None) -> list[CoordinationEvent]:
        """Return the in-memory tail, optionally filtered by event name."""
        if name is None:
            return list(self._recent)
        return [event for event in self._recent if event.name == name]
