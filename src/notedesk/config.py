"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "notedesk.toml"

DEBOUNCE_MS_CAP = 5_000
EMPTY_QUERY_FILE_LIMIT_CAP = 100
MAX_RESULTS_CAP = 200

DEFAULT_QUICK_OPEN_DEBOUNCE_MS = 200
DEFAULT_SEARCH_DEBOUNCE_MS = 300
DEFAULT_EMPTY_QUERY_FILE_LIMIT = 10
DEFAULT_MAX_RESULTS = 50


@dataclass(slots=True, frozen=True)
class SearchConfig:
    """Debounce and result-size settings for the search surfaces."""

    quick_open_debounce_ms: int = DEFAULT_QUICK_OPEN_DEBOUNCE_MS
    search_debounce_ms: int = DEFAULT_SEARCH_DEBOUNCE_MS
    empty_query_file_limit: int = DEFAULT_EMPTY_QUERY_FILE_LIMIT
    max_results: int = DEFAULT_MAX_RESULTS

    @property
    def quick_open_debounce_seconds(self) -> float:
        return self.quick_open_debounce_ms / 1000.0

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0


@dataclass(slots=True, frozen=True)
class EventsConfig:
    """Structured event log toggle."""

    enabled: bool = False


@dataclass(slots=True, frozen=True)
class WorkspaceConfig:
    """Fully merged workspace configuration."""

    data_dir: Path
    search: SearchConfig
    events: EventsConfig

    @property
    def events_path(self) -> Path:
        return self.data_dir / "events.jsonl"

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for diagnostics."""
        return {
            "data_dir": str(self.data_dir),
            "search": {
                "quick_open_debounce_ms": self.search.quick_open_debounce_ms,
                "search_debounce_ms": self.search.search_debounce_ms,
                "empty_query_file_limit": self.search.empty_query_file_limit,
                "max_results": self.search.max_results,
            },
            "events": {
                "enabled": self.events.enabled,
            },
        }


@dataclass(slots=True, frozen=True)
class ConfigOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    quick_open_debounce_ms: int | None = None
    search_debounce_ms: int | None = None
    empty_query_file_limit: int | None = None
    max_results: int | None = None
    events_enabled: bool | None = None


def default_config(data_dir: Path | None = None) -> WorkspaceConfig:
    """Build default config, optionally rooted at a given data directory."""
    resolved = (data_dir or Path.home() / ".notedesk").resolve()
    return WorkspaceConfig(data_dir=resolved, search=SearchConfig(), events=EventsConfig())


def load_config_file(config_dir: Path) -> dict[str, object]:
    """Load optional notedesk.toml from the config directory."""
    config_path = config_dir / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def merge_config(
    base: WorkspaceConfig, file_payload: dict[str, object], overrides: ConfigOverrides
) -> WorkspaceConfig:
    """Merge defaults, config file, then explicit overrides."""
    search_payload = _get_table(file_payload, "search")
    events_payload = _get_table(file_payload, "events")

    search = SearchConfig(
        quick_open_debounce_ms=_optional_positive_int_with_cap(
            search_payload.get("quick_open_debounce_ms"),
            "search.quick_open_debounce_ms",
            base.search.quick_open_debounce_ms,
            DEBOUNCE_MS_CAP,
        ),
        search_debounce_ms=_optional_positive_int_with_cap(
            search_payload.get("search_debounce_ms"),
            "search.search_debounce_ms",
            base.search.search_debounce_ms,
            DEBOUNCE_MS_CAP,
        ),
        empty_query_file_limit=_optional_positive_int_with_cap(
            search_payload.get("empty_query_file_limit"),
            "search.empty_query_file_limit",
            base.search.empty_query_file_limit,
            EMPTY_QUERY_FILE_LIMIT_CAP,
        ),
        max_results=_optional_positive_int_with_cap(
            search_payload.get("max_results"),
            "search.max_results",
            base.search.max_results,
            MAX_RESULTS_CAP,
        ),
    )

    events_enabled = base.events.enabled
    if "enabled" in events_payload:
        raw_enabled = events_payload["enabled"]
        if not isinstance(raw_enabled, bool):
            raise ValueError("Config field 'events.enabled' must be a boolean.")
        events_enabled = raw_enabled

    merged = WorkspaceConfig(
        data_dir=base.data_dir,
        search=search,
        events=EventsConfig(enabled=events_enabled),
    )
    return apply_overrides(merged, overrides)


def apply_overrides(config: WorkspaceConfig, overrides: ConfigOverrides) -> WorkspaceConfig:
    """Apply startup overrides at highest precedence."""
    search = SearchConfig(
        quick_open_debounce_ms=_optional_positive_int_with_cap(
            overrides.quick_open_debounce_ms,
            "overrides.quick_open_debounce_ms",
            config.search.quick_open_debounce_ms,
            DEBOUNCE_MS_CAP,
        ),
        search_debounce_ms=_optional_positive_int_with_cap(
            overrides.search_debounce_ms,
            "overrides.search_debounce_ms",
            config.search.search_debounce_ms,
            DEBOUNCE_MS_CAP,
        ),
        empty_query_file_limit=_optional_positive_int_with_cap(
            overrides.empty_query_file_limit,
            "overrides.empty_query_file_limit",
            config.search.empty_query_file_limit,
            EMPTY_QUERY_FILE_LIMIT_CAP,
        ),
        max_results=_optional_positive_int_with_cap(
            overrides.max_results,
            "overrides.max_results",
            config.search.max_results,
            MAX_RESULTS_CAP,
        ),
    )
    events = EventsConfig(
        enabled=(
            overrides.events_enabled
            if overrides.events_enabled is not None
            else config.events.enabled
        )
    )
    data_dir = overrides.data_dir or config.data_dir
    return WorkspaceConfig(data_dir=data_dir.resolve(), search=search, events=events)


def load_effective_config(
    config_dir: Path | None = None, overrides: ConfigOverrides | None = None
) -> WorkspaceConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    base = default_config()
    payload = load_config_file(config_dir.resolve()) if config_dir is not None else {}
    return merge_config(base, payload, overrides or ConfigOverrides())


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
