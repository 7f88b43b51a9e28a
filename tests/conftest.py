from __future__ import annotations

from pathlib import Path

import pytest

from fakes import FakeBackend
from notedesk.config import ConfigOverrides
from notedesk.workspace import Workspace, create_workspace


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def overrides(tmp_path: Path) -> ConfigOverrides:
    return ConfigOverrides(
        data_dir=tmp_path / ".notedesk",
        quick_open_debounce_ms=5,
        search_debounce_ms=5,
    )


@pytest.fixture
def workspace(backend: FakeBackend, overrides: ConfigOverrides) -> Workspace:
    return create_workspace(backend, overrides=overrides)
