"""Wikilink-style cross references inside note text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

CROSS_REFERENCE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\[\[([^\]]+)\]\]")


@dataclass(slots=True, frozen=True)
class CrossReference:
    """One `[[target]]` or `[[target|alias]]` occurrence."""

    target: str
    alias: str | None
    full_text: str
    start: int
    end: int


def parse_cross_references(text: str) -> list[CrossReference]:
    output: list[CrossReference] = []
    for match in CROSS_REFERENCE_PATTERN.finditer(text):
        inner = match.group(1)
        target, _, alias = inner.partition("|")
        target = target.strip()
        if not target:
            continue
        output.append(
            CrossReference(
                target=target,
                alias=alias.strip() or None,
                full_text=match.group(0),
                start=match.start(),
                end=match.end(),
            )
        )
    return output


def cross_reference_at(text: str, position: int) -> CrossReference | None:
    """Return the reference spanning `position` (end exclusive)."""
    for reference in parse_cross_references(text):
        if reference.start <= position < reference.end:
            return reference
    return None
