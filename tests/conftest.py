"""Shared test fixtures for Class Atlas."""

from __future__ import annotations

import pytest
from loguru import logger

from class_atlas.settings import AtlasSettings, DiagramSettings


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Run every test from an empty directory so no stray class-atlas.toml is picked up."""
    monkeypatch.chdir(tmp_path)
    for name in ("CLASS_ATLAS_WORKERS", "CLASS_ATLAS_DIAGRAM__SHOW_PACKAGE"):
        monkeypatch.delenv(name, raising=False)
    yield
    # CLI runs bind a sink to the runner's temporary stderr; drop it.
    logger.remove()


@pytest.fixture
def diagram():
    """Default diagram settings: everything visible, all relationships inferred."""
    return DiagramSettings()


@pytest.fixture
def settings(tmp_path):
    """Create test settings rooted at a temporary directory."""
    return AtlasSettings(project_root=tmp_path)
