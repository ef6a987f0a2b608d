"""Project discovery: walk a tree and run matching handlers on each file."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from playbook.core.config import DEFAULT_EXCLUDED_DIRS
from playbook.core.exceptions import DiscoveryError, DiscoveryExtractError, DiscoveryReadError
from playbook.core.models import Project, normalize_project
from playbook.discovery.handlers import AVAILABLE_HANDLERS, ProjectHandler
from playbook.discovery.walker import FileWalker

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    """Outcome of one tree scan.

    Attributes:
        projects: Normalized projects, cwd relative to the scanned root.
        errors: Per-file failures that were skipped.

    """

    projects: list[Project] = field(default_factory=list)
    errors: list[DiscoveryError] = field(default_factory=list)


class ProjectDiscovery:
    """Finds launchable projects in a directory tree.

    Attributes:
        handlers: Ordered handler registry consulted for every file.
        excluded_dirs: Directory names never descended into.

    """

    def __init__(
        self,
        handlers: Sequence[ProjectHandler] = AVAILABLE_HANDLERS,
        excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
    ) -> None:
        self.handlers = tuple(handlers)
        self.excluded_dirs = tuple(excluded_dirs)

    def _is_candidate(self, filename: str) -> bool:
        return any(h.matches(filename) for h in self.handlers)

    def discover(self, root: Path) -> DiscoveryResult:
        """Scan root and collect projects plus per-file errors.

        Read and extraction failures never abort the walk.

        Args:
            root: Directory to scan.

        Returns:
            DiscoveryResult with projects in walk order.

        """
        root = root.resolve()
        result = DiscoveryResult()

        if not self.handlers:
            logger.debug("No discovery handlers registered, skipping scan of %s", root)
            return result

        walker = FileWalker(self.excluded_dirs, accept=self._is_candidate)
        for path in walker.walk(root):
            result.projects.extend(self._process_file(path, root, result.errors))

        logger.info(
            "Discovered %d projects under %s (%d files skipped)",
            len(result.projects),
            root,
            len(result.errors),
        )
        return result

    def find_projects(self, root: Path) -> list[Project]:
        """Scan root and return just the discovered projects."""
        return self.discover(root).projects

    def _process_file(self, path: Path, root: Path, errors: list[DiscoveryError]) -> list[Project]:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            errors.append(DiscoveryReadError(f"Cannot read {path}: {e}", path))
            return []

        projects: list[Project] = []
        for handler in self.handlers:
            if not handler.matches(path.name):
                continue
            try:
                found = []
                for record in handler.extract(path, content):
                    record = dict(record)
                    record.setdefault("cwd", str(path.parent))
                    found.append(normalize_project(record, root))
                projects.extend(found)
            except Exception as e:
                logger.warning("Handler %s failed on %s: %s", handler.name, path, e)
                errors.append(
                    DiscoveryExtractError(
                        f"Handler {handler.name} failed on {path}: {e}", path, handler=handler.name
                    )
                )
        return projects
