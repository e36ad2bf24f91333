# Test configuration and fixtures
import logging
from pathlib import Path

import pytest


@pytest.fixture
def src(tmp_path: Path) -> Path:
    """Empty source folder."""
    d = tmp_path / "source"
    d.mkdir()
    return d


@pytest.fixture
def dst(tmp_path: Path) -> Path:
    """Empty destination folder."""
    d = tmp_path / "destination"
    d.mkdir()
    return d


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Restore the root logger level changed by App runs."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
