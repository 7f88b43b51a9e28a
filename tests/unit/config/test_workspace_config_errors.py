from __future__ import annotations

from pathlib import Path

import pytest

from notedesk.config import ConfigOverrides, load_effective_config


def _write(tmp_path: Path, *lines: str) -> None:
    (tmp_path / "notedesk.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_debounce_type_names_the_field(tmp_path: Path) -> None:
    _write(tmp_path, "[search]", 'search_debounce_ms = "fast"')

    with pytest.raises(ValueError, match="search.search_debounce_ms"):
        load_effective_config(config_dir=tmp_path)


def test_boolean_is_not_an_integer(tmp_path: Path) -> None:
    _write(tmp_path, "[search]", "max_results = true")

    with pytest.raises(ValueError, match="search.max_results"):
        load_effective_config(config_dir=tmp_path)


def test_value_above_cap_is_rejected(tmp_path: Path) -> None:
    _write(tmp_path, "[search]", "empty_query_file_limit = 500")

    with pytest.raises(ValueError, match="must be <= 100"):
        load_effective_config(config_dir=tmp_path)


def test_invalid_section_type_is_rejected(tmp_path: Path) -> None:
    _write(tmp_path, 'search = "not-a-table"')

    with pytest.raises(ValueError, match="section 'search'"):
        load_effective_config(config_dir=tmp_path)


def test_events_flag_must_be_boolean(tmp_path: Path) -> None:
    _write(tmp_path, "[events]", 'enabled = "yes"')

    with pytest.raises(ValueError, match="events.enabled"):
        load_effective_config(config_dir=tmp_path)


def test_invalid_override_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.quick_open_debounce_ms"):
        load_effective_config(
            overrides=ConfigOverrides(data_dir=tmp_path, quick_open_debounce_ms=0)
        )
