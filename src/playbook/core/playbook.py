"""Playbook facade: plays, discovery and the orchestrator behind one object.

Usage:
    from playbook import Playbook

    book = Playbook(cwd=Path("~/code/shop").expanduser())
    play = book.create("dev")
    play.projects.extend(book.find_projects())
    book.save(play)
    await book.run("dev", print)
"""

import asyncio
import logging
from pathlib import Path

from playbook.core.config import PlaybookConfig, get_config
from playbook.core.exceptions import PlayNotFoundError
from playbook.core.models import Play, Project, normalize_project
from playbook.core.play_service import PlayService
from playbook.core.store import ConfigStore
from playbook.discovery.service import DiscoveryResult, ProjectDiscovery
from playbook.orchestrator.orchestrator import ProcessOrchestrator
from playbook.orchestrator.process_runner import ProcessRunner
from playbook.orchestrator.state import RunResult, Sink

logger = logging.getLogger(__name__)


class Playbook:
    """Entry point combining the play store, discovery and process runs.

    Attributes:
        cwd: Working root; the store lives here and project cwds are relative to it.
        plays: CRUD service over stored plays.
        discovery: Project discovery over the handler registry.
        orchestrator: Runs one play at a time.

    """

    def __init__(
        self,
        cwd: Path | None = None,
        line_limit: int | None = None,
        config: PlaybookConfig | None = None,
    ) -> None:
        config = config if config is not None else get_config()
        self.cwd = (cwd or Path.cwd()).resolve()
        self.plays = PlayService(ConfigStore.in_directory(self.cwd), self.cwd)
        self.discovery = ProjectDiscovery(excluded_dirs=config.excluded_dirs)
        self.orchestrator = ProcessOrchestrator(
            self.cwd,
            default_command=config.default_command,
            runner=ProcessRunner(config.termination_grace_seconds),
        )

        initial_limit = line_limit if line_limit is not None else config.line_limit
        if initial_limit is not None:
            self.line_limit = initial_limit

    @property
    def line_limit(self) -> int:
        return self.plays.line_limit

    @line_limit.setter
    def line_limit(self, value: object) -> None:
        self.plays.line_limit = value

    def get_all(self) -> list[Play]:
        return self.plays.get_all()

    def get(self, name: str) -> Play | None:
        return self.plays.get(name)

    def create(self, name: str) -> Play:
        return self.plays.create(name)

    def save(self, play: Play) -> Play:
        return self.plays.save(play)

    def delete(self, play: Play | str) -> None:
        self.plays.delete(play)

    def discover(self, cwd: Path | None = None) -> DiscoveryResult:
        """Scan cwd (default: the working root) for projects and per-file errors.

        Project cwds are relative to the scanned directory.
        """
        return self.discovery.discover(cwd or self.cwd)

    def find_projects(self, cwd: Path | None = None) -> list[Project]:
        """Scan cwd (default: the working root) for projects ready to save.

        Unlike discover(), project cwds are relative to the working root, so
        the result can be added to a play as is.
        """
        scanned = (cwd or self.cwd).resolve()
        return self.rebase(self.discover(scanned).projects, scanned)

    def rebase(self, projects: list[Project], scanned: Path) -> list[Project]:
        """Rewrite cwds relative to scanned so they are relative to the working root."""
        return [
            normalize_project(p.model_copy(update={"cwd": str(scanned / p.cwd)}), self.cwd)
            for p in projects
        ]

    async def run(self, play: Play | str, sink: Sink) -> RunResult:
        """Run a play (or the stored play of that name) to completion.

        Raises:
            PlayNotFoundError: If a name was given and no such play exists.
            AlreadyRunningError: If a play is already running.
            RunFailedError: If any project failed.

        """
        if isinstance(play, str):
            resolved = self.plays.get(play)
            if resolved is None:
                raise PlayNotFoundError(play)
            play = resolved

        handle = self.orchestrator.run(play, sink, line_limit=self.line_limit)
        # Cancelling the caller does not stop the run; cancel() does
        return await asyncio.shield(handle)

    async def cancel(self) -> None:
        await self.orchestrator.cancel()
