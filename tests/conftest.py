"""Shared pytest fixtures for Markaround tests."""

from __future__ import annotations

import pytest

from markaround.critic.render import CriticRenderer


@pytest.fixture
def renderer() -> CriticRenderer:
    """A renderer with default markdown options, independent of settings."""
    return CriticRenderer()
