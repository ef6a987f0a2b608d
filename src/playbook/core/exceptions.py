"""Exception hierarchy for playbook.

All errors raised by playbook derive from PlaybookError so callers can
catch the whole family with a single handler:

    PlaybookError
    ├── ConfigError
    ├── PlayError
    │   ├── PlayAlreadyExistsError
    │   └── PlayNotFoundError
    ├── OrchestratorError
    │   ├── AlreadyRunningError
    │   └── RunFailedError
    ├── ProcessError
    │   ├── ProcessSpawnError
    │   └── ProcessExitError
    └── DiscoveryError
        ├── DiscoveryReadError
        └── DiscoveryExtractError
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playbook.core.models import Project

__all__ = [
    "AlreadyRunningError",
    "ConfigError",
    "DiscoveryError",
    "DiscoveryExtractError",
    "DiscoveryReadError",
    "OrchestratorError",
    "PlayAlreadyExistsError",
    "PlayError",
    "PlayNotFoundError",
    "PlaybookError",
    "ProcessError",
    "ProcessExitError",
    "ProcessSpawnError",
    "RunFailedError",
]


class PlaybookError(Exception):
    """Base class for all playbook errors."""


class ConfigError(PlaybookError):
    """Configuration file is missing required structure or has invalid values."""


class PlayError(PlaybookError):
    """Error concerning a named play.

    Attributes:
        name: Name of the play involved.

    """

    def __init__(self, message: str, name: str = "") -> None:
        super().__init__(message)
        self.name = name


class PlayAlreadyExistsError(PlayError):
    """A play with the requested name is already stored."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Play "{name}" already exists!', name=name)


class PlayNotFoundError(PlayError):
    """A play name could not be resolved where one is required."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Play "{name}" does not exist', name=name)


class OrchestratorError(PlaybookError):
    """Error raised by the process orchestrator."""


class AlreadyRunningError(OrchestratorError):
    """A run was requested while another one is still active."""

    def __init__(self, message: str = "A play is already running!") -> None:
        super().__init__(message)


class ProcessError(PlaybookError):
    """A child process belonging to a project failed.

    Attributes:
        project: The project whose process failed.

    """

    def __init__(self, message: str, project: Project | None = None) -> None:
        super().__init__(message)
        self.project = project


class ProcessSpawnError(ProcessError):
    """The child process could not be started (missing executable or cwd)."""


class ProcessExitError(ProcessError):
    """The child process exited with a non-success status.

    Attributes:
        exit_code: The process return code (negative for signals on POSIX).

    """

    def __init__(self, message: str, project: Project | None = None, exit_code: int = 1) -> None:
        super().__init__(message, project=project)
        self.exit_code = exit_code


class RunFailedError(OrchestratorError):
    """A run settled with at least one failed project.

    Attributes:
        failures: One ProcessError per failed project, in play order.

    """

    def __init__(self, failures: Sequence[ProcessError]) -> None:
        self.failures = list(failures)
        count = len(self.failures)
        summary = "; ".join(str(f) for f in self.failures)
        super().__init__(f"{count} project(s) failed: {summary}")


class DiscoveryError(PlaybookError):
    """A single file could not be processed during project discovery.

    Attributes:
        path: The file that failed.

    """

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = path


class DiscoveryReadError(DiscoveryError):
    """Reading a candidate file failed."""


class DiscoveryExtractError(DiscoveryError):
    """A handler raised while extracting projects from a file.

    Attributes:
        handler: Name of the handler that failed.

    """

    def __init__(self, message: str, path: Path, handler: str = "") -> None:
        super().__init__(message, path)
        self.handler = handler
