"""Typed models for backend command results and payload decoding."""

from __future__ import annotations

import re
from dataclasses import dataclass

SNIPPET_MARK_PATTERN = re.compile(r"<mark>(.*?)</mark>", re.DOTALL)


@dataclass(slots=True, frozen=True)
class FileReference:
    """One directory listing entry; `path` is the unique absolute key."""

    name: str
    path: str
    is_directory: bool
    size: int | None = None
    modified_at: str | None = None


@dataclass(slots=True, frozen=True)
class FileMatch:
    """File-name search hit."""

    path: str
    title: str | None
    score: float


@dataclass(slots=True, frozen=True)
class ContentMatch:
    """Full-content search hit; `snippet` may carry <mark> highlighting."""

    path: str
    title: str | None
    snippet: str
    match_count: int


@dataclass(slots=True, frozen=True)
class SnippetSegment:
    """Plain or highlighted run of snippet text."""

    text: str
    highlighted: bool


def decode_file_references(payload: object) -> list[FileReference] | None:
    """Decode a listing payload, skipping malformed rows; None if not a list."""
    if not isinstance(payload, list):
        return None
    output: list[FileReference] = []
    for obj in payload:
        if not isinstance(obj, dict):
            continue
        name = obj.get("name")
        path = obj.get("path")
        is_directory = obj.get("is_directory")
        size = obj.get("size")
        modified = obj.get("modified")
        if not isinstance(name, str):
            continue
        if not isinstance(path, str) or not path:
            continue
        if not isinstance(is_directory, bool):
            continue
        output.append(
            FileReference(
                name=name,
                path=path,
                is_directory=is_directory,
                size=size if isinstance(size, int) and not isinstance(size, bool) else None,
                modified_at=modified if isinstance(modified, str) else None,
            )
        )
    return output


def decode_file_matches(payload: object) -> list[FileMatch] | None:
    """Decode a file-name search payload in backend rank order."""
    if not isinstance(payload, list):
        return None
    output: list[FileMatch] = []
    for obj in payload:
        if not isinstance(obj, dict):
            continue
        path = obj.get("path")
        title = obj.get("title")
        score = obj.get("score")
        if not isinstance(path, str) or not path:
            continue
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            continue
        output.append(
            FileMatch(
                path=path,
                title=title if isinstance(title, str) else None,
                score=float(score),
            )
        )
    return output


def decode_content_matches(payload: object) -> list[ContentMatch] | None:
    """Decode a content search payload in backend rank order."""
    if not isinstance(payload, list):
        return None
    output: list[ContentMatch] = []
    for obj in payload:
        if not isinstance(obj, dict):
            continue
        path = obj.get("path")
        title = obj.get("title")
        snippet = obj.get("snippet")
        matches = obj.get("matches")
        if not isinstance(path, str) or not path:
            continue
        if not isinstance(snippet, str):
            continue
        if isinstance(matches, bool) or not isinstance(matches, int):
            continue
        output.append(
            ContentMatch(
                path=path,
                title=title if isinstance(title, str) else None,
                snippet=snippet,
                match_count=matches,
            )
        )
    return output


def snippet_segments(snippet: str) -> list[SnippetSegment]:
    """Split a <mark>-annotated snippet into plain and highlighted segments."""
    segments: list[SnippetSegment] = []
    cursor = 0
    for match in SNIPPET_MARK_PATTERN.finditer(snippet):
        if match.start() > cursor:
            segments.append(SnippetSegment(text=snippet[cursor : match.start()], highlighted=False))
        if match.group(1):
            segments.append(SnippetSegment(text=match.group(1), highlighted=True))
        cursor = match.end()
    if cursor < len(snippet):
        segments.append(SnippetSegment(text=snippet[cursor:], highlighted=False))
    return segments


def basename(path: str) -> str:
    """Return the last path component for display."""
    normalized = path.replace("\\", "/").rstrip("/")
    if not normalized:
        return path
    return normalized.rsplit("/", 1)[-1]
