"""Shared fixtures for omo-config tests."""

from pathlib import Path

import pytest
from omo_config_cli.composer import EditSession
from omo_config_cli.model_catalog import ModelCatalog
from omo_config_cli.storage import ProfileStore


@pytest.fixture
def catalog():
    """Small model catalog with and without variants."""
    return ModelCatalog(
        {
            "openai/gpt-5.2": ["low", "medium", "high", "xhigh"],
            "anthropic/claude-opus-4-5": ["max"],
            "opencode/grok-code": [],
        }
    )


@pytest.fixture
def session(catalog):
    """An edit session open on a new, named profile."""
    edit_session = EditSession(catalog)
    edit_session.open(name="Test profile")
    return edit_session


@pytest.fixture
def store(tmp_path: Path):
    return ProfileStore(tmp_path / "data")
