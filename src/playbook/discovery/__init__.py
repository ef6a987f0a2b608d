"""Project discovery.

Usage:
    from playbook.discovery import ProjectDiscovery

    projects = ProjectDiscovery().find_projects(Path("~/code").expanduser())
"""

from playbook.discovery.service import DiscoveryResult, ProjectDiscovery
from playbook.discovery.walker import FileWalker

__all__ = ["DiscoveryResult", "FileWalker", "ProjectDiscovery"]
