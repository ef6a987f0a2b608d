"""playbook - run a named set of projects as concurrent child processes.

Public API:
    Playbook: Facade over the play store, discovery and orchestrator
    Play, Project: Data models
    ProcessOrchestrator: Run/cancel state machine for one play
    ProjectDiscovery: Directory scan with pluggable handlers
"""

from playbook.core.models import Play, Project
from playbook.core.playbook import Playbook
from playbook.discovery.service import ProjectDiscovery
from playbook.orchestrator.orchestrator import ProcessOrchestrator

__version__ = "0.1.0"

__all__ = [
    "Play",
    "Playbook",
    "ProcessOrchestrator",
    "Project",
    "ProjectDiscovery",
    "__version__",
]
