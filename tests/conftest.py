"""Shared fixtures for overlay tests."""

import pytest

from envoverlay.services.overlay import OverlayManager


@pytest.fixture
def write_env(tmp_path):
    """Write an env file under tmp_path and return its path as a string."""

    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def environ():
    """An isolated environment table standing in for os.environ."""
    return {"PATH": "/usr/bin", "HOME": "/home/tester"}


@pytest.fixture
def manager(environ):
    return OverlayManager(environ=environ)
