"""Backend command contract, payload models and the calling gateway."""

from .contract import Backend
from .gateway import BackendGateway
from .models import (
    ContentMatch,
    FileMatch,
    FileReference,
    SnippetSegment,
    basename,
    decode_content_matches,
    decode_file_matches,
    decode_file_references,
    snippet_segments,
)

__all__ = [
    "Backend",
    "BackendGateway",
    "ContentMatch",
    "FileMatch",
    "FileReference",
    "SnippetSegment",
    "basename",
    "decode_content_matches",
    "decode_file_matches",
    "decode_file_references",
    "snippet_segments",
]
