"""Discovery handlers.

AVAILABLE_HANDLERS is the fixed, ordered registry consulted by project
discovery. It is built once at import time.
"""

from playbook.discovery.handlers.base import ProjectHandler
from playbook.discovery.handlers.dotnet import DotnetProjectHandler
from playbook.discovery.handlers.npm import NpmPackageHandler

AVAILABLE_HANDLERS: tuple[ProjectHandler, ...] = (
    NpmPackageHandler(),
    DotnetProjectHandler(),
)

__all__ = [
    "AVAILABLE_HANDLERS",
    "DotnetProjectHandler",
    "NpmPackageHandler",
    "ProjectHandler",
]
