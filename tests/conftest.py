"""Pytest configuration and fixtures for playbook tests."""

import sys
from pathlib import Path

import pytest

from playbook.core.models import Project


@pytest.fixture(autouse=True)
def reset_and_load_default_config(request):
    """Reset config singleton and load defaults for tests.

    Loading an explicit dict keeps ~/.config/playbook/config.yaml out of the
    tests. Tests that exercise config loading itself can opt out with:
        @pytest.mark.no_auto_config
    """
    from playbook.core.config import _reset_config, load_config

    _reset_config()

    if not request.node.get_closest_marker("no_auto_config"):
        load_config({"termination_grace_seconds": 1.0})

    yield

    _reset_config()


@pytest.fixture
def python_project(tmp_path: Path):
    """Factory for projects that run an inline Python script in tmp_path."""

    def _make(script: str, name: str = "py", **kwargs) -> Project:
        return Project(
            cwd=str(tmp_path),
            command=sys.executable,
            args=["-c", script],
            name=name,
            **kwargs,
        )

    return _make
