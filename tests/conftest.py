"""
pytest configuration and shared fixtures for autoscaffold tests.

Fixtures
--------
write : Callable[[Path, str, str], Path]
    Writes a file (creating parent directories) and returns its path.

project : Path
    A project with a root ``.scaffold`` folder holding a component template,
    an existing ``src/components`` directory and one pre-existing empty file.

fake_observer : MagicMock
    Stand-in for a watchdog observer, so event callbacks can be driven
    directly without real file-system notifications.
"""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest


COMPONENT_TEMPLATE = '<script setup lang="ts"></script>\n\n<template>\n  <div></div>\n</template>\n'


def _write(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write() -> Callable[[Path, str, str], Path]:
    """Return a helper that writes ``content`` to ``root / relative``."""
    return _write


@pytest.fixture
def component_template() -> str:
    """Content of the component template in the ``project`` fixture."""
    return COMPONENT_TEMPLATE


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Create a small project tree.

    Layout::

        .scaffold/src/components/[...path].vue
        src/components/Existing.vue   (empty, pre-existing)
    """
    root = tmp_path / "project"
    root.mkdir()
    _write(root, ".scaffold/src/components/[...path].vue", COMPONENT_TEMPLATE)
    _write(root, "src/components/Existing.vue", "")
    return root.resolve()


@pytest.fixture
def fake_observer() -> MagicMock:
    """A MagicMock observer; ``schedule`` returns a fresh handle per call."""
    observer = MagicMock(name="observer")
    observer.schedule.side_effect = lambda *args, **kwargs: MagicMock(name="watch")
    return observer


# =============================================================================
# pytest Configuration
# =============================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test suite."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
