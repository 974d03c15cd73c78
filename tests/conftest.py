"""Shared fixtures."""

from pathlib import Path

import pytest

from fibersplice.engine import ModeSettings, RecalculationCoordinator
from fibersplice.storage import InMemoryStore


@pytest.fixture
def settings(tmp_path):
    """Built-in mode defaults, independent of any settings file."""
    return ModeSettings(str(tmp_path / "no-modes.yaml"))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def coordinator(store, settings):
    return RecalculationCoordinator(store, settings)


@pytest.fixture
def sample_project_path():
    return str(Path(__file__).resolve().parent.parent / "examples" / "sample_project.yaml")
