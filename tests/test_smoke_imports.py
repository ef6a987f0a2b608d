"""Smoke tests: every package and module imports cleanly."""

import importlib

import pytest

MODULES = [
    "playbook",
    "playbook.cli",
    "playbook.cli_utils",
    "playbook.core",
    "playbook.core.config",
    "playbook.core.exceptions",
    "playbook.core.models",
    "playbook.core.play_service",
    "playbook.core.playbook",
    "playbook.core.store",
    "playbook.discovery",
    "playbook.discovery.handlers",
    "playbook.discovery.handlers.base",
    "playbook.discovery.handlers.dotnet",
    "playbook.discovery.handlers.npm",
    "playbook.discovery.service",
    "playbook.discovery.walker",
    "playbook.orchestrator",
    "playbook.orchestrator.orchestrator",
    "playbook.orchestrator.process_runner",
    "playbook.orchestrator.state",
]


@pytest.mark.parametrize("module", MODULES)
def test_module_imports(module: str):
    """Module imports without error."""
    importlib.import_module(module)


def test_public_api():
    """Top-level package exposes the public API."""
    import playbook

    for name in playbook.__all__:
        assert hasattr(playbook, name), name
