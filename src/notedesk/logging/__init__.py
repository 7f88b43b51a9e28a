"""Structured logging utilities."""

from .events import (
    CoordinationEvent,
    EventRecorder,
    JsonlEventLogger,
    sanitize_arguments,
    utc_timestamp,
)

__all__ = [
    "CoordinationEvent",
    "EventRecorder",
    "JsonlEventLogger",
    "sanitize_arguments",
    "utc_timestamp",
]
