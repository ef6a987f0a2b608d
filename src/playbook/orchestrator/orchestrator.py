"""Process orchestrator: runs every enabled project of a play concurrently.

One orchestrator owns at most one run at a time. Within a run each project
gets its own task, which waits out the project's delay (measured from run
start), spawns the process and streams its output to the sink.

Failure policy: when a project fails to spawn or exits non-zero, projects
still waiting for their delay are not launched, already running siblings are
left to finish, and the run raises RunFailedError once everything settled.

Usage:
    orchestrator = ProcessOrchestrator(Path.cwd(), line_limit=200)
    handle = orchestrator.run(play, print)
    ...
    await orchestrator.cancel()   # optional
    result = await handle
"""

import asyncio
import logging
from collections import deque
from pathlib import Path

from playbook.core.config import coerce_line_limit
from playbook.core.exceptions import AlreadyRunningError, ProcessExitError, ProcessSpawnError, RunFailedError
from playbook.core.models import Play
from playbook.orchestrator.process_runner import ProcessRunner
from playbook.orchestrator.state import (
    ActiveRun,
    Cancelling,
    Idle,
    OrchestratorState,
    ProjectRun,
    ProjectStatus,
    Running,
    RunOutcome,
    RunResult,
    Sink,
)

logger = logging.getLogger(__name__)

DEFAULT_LINE_LIMIT = 1
DEFAULT_COMMAND = "npm"


class ProcessOrchestrator:
    """Launches, streams, line-limits and cancels the processes of one play.

    Attributes:
        root: Directory project cwds are resolved against.
        line_limit: Default size of the per-run output history.
        default_command: Executable for projects without a command.
        runner: Spawns and terminates processes.

    """

    def __init__(
        self,
        root: Path,
        *,
        line_limit: int = DEFAULT_LINE_LIMIT,
        default_command: str = DEFAULT_COMMAND,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.root = root
        self.line_limit = coerce_line_limit(line_limit)
        self.default_command = default_command
        self.runner = runner if runner is not None else ProcessRunner()
        self._state: OrchestratorState = Idle()
        self._history: deque[str] = deque(maxlen=self.line_limit)

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True while a run is active or being cancelled."""
        return not isinstance(self._state, Idle)

    @property
    def lines(self) -> list[str]:
        """Most recent output lines of the current or last run (oldest first)."""
        return list(self._history)

    def run(self, play: Play, sink: Sink, *, line_limit: int | None = None) -> "asyncio.Task[RunResult]":
        """Start running every enabled project of play.

        Must be called from a running event loop.

        Args:
            play: Play to execute.
            sink: Receives each formatted output line; may be a coroutine function.
            line_limit: History size for this run; defaults to self.line_limit.

        Returns:
            Task that resolves to a RunResult (COMPLETED or CANCELLED) or
            raises RunFailedError.

        Raises:
            AlreadyRunningError: If a run is already active.

        """
        if not isinstance(self._state, Idle):
            raise AlreadyRunningError()

        loop = asyncio.get_running_loop()
        limit = coerce_line_limit(self.line_limit if line_limit is None else line_limit)
        run = ActiveRun(
            play=play,
            sink=sink,
            history=deque(maxlen=limit),
            projects=[ProjectRun(project=p) for p in play.enabled_projects],
        )
        self._history = run.history
        self._state = Running(run)
        run.task = loop.create_task(self._execute(run), name=f"play:{play.name}")
        return run.task

    async def cancel(self) -> None:
        """Cancel the active run and wait until all its processes exited.

        No-op when idle; safe to call repeatedly.
        """
        state = self._state
        if isinstance(state, Idle):
            return

        run = state.run
        if isinstance(state, Running):
            logger.info("Cancelling play %s", run.play.name)
            self._state = Cancelling(run)
            run.cancel_requested = True
            run.stop_launching.set()
            await asyncio.gather(*(self.runner.terminate(p) for p in run.live_processes()))

        if run.task is not None:
            await asyncio.shield(run.task)

    async def _execute(self, run: ActiveRun) -> RunResult:
        play = run.play
        logger.info(
            "Running play %s (%d of %d projects enabled)",
            play.name,
            len(run.projects),
            len(play.projects),
        )
        try:
            run.started_at = asyncio.get_running_loop().time()
            await asyncio.gather(*(self._run_project(run, pr) for pr in run.projects))

            if run.cancel_requested:
                logger.info("Play %s cancelled", play.name)
                return RunResult(play.name, RunOutcome.CANCELLED, tuple(run.projects))

            failures = run.failures
            if failures:
                logger.error("Play %s failed (%d projects)", play.name, len(failures))
                raise RunFailedError(failures)

            logger.info("Play %s completed", play.name)
            return RunResult(play.name, RunOutcome.COMPLETED, tuple(run.projects))
        finally:
            self._state = Idle()

    async def _wait_for_launch(self, run: ActiveRun, delay_ms: int) -> bool:
        """Wait out a project's delay; False if launching was stopped meanwhile."""
        loop = asyncio.get_running_loop()
        remaining = run.started_at + delay_ms / 1000 - loop.time()
        if remaining > 0 and not run.stop_launching.is_set():
            try:
                await asyncio.wait_for(run.stop_launching.wait(), timeout=remaining)
            except TimeoutError:
                pass
        return not run.stop_launching.is_set()

    def _stop_launching(self, run: ActiveRun, reason: str) -> None:
        if not run.stop_launching.is_set():
            pending = sum(1 for pr in run.projects if pr.status == ProjectStatus.PENDING)
            logger.warning("%s; %d pending launches dropped", reason, pending)
            run.stop_launching.set()

    async def _run_project(self, run: ActiveRun, pr: ProjectRun) -> None:
        project = pr.project

        if not await self._wait_for_launch(run, project.delay):
            pr.status = ProjectStatus.SKIPPED
            logger.debug("Not launching %s", project.label)
            return

        try:
            process = await self.runner.spawn(project, self.root / project.cwd, self.default_command)
        except ProcessSpawnError as e:
            pr.status = ProjectStatus.FAILED
            pr.error = e
            self._stop_launching(run, f"{project.label} failed to start")
            return

        pr.process = process
        pr.status = ProjectStatus.RUNNING
        if run.cancel_requested:
            # Spawn finished after cancel() swept the live processes
            await self.runner.terminate(process)

        async def on_line(line: str) -> None:
            await self._emit(run, pr, line)

        try:
            await self.runner.stream_lines(process, on_line)
            pr.exit_code = await process.wait()
        except asyncio.CancelledError:
            await self.runner.terminate(process)
            raise

        if run.cancel_requested:
            pr.status = ProjectStatus.CANCELLED
        elif pr.exit_code != 0:
            pr.status = ProjectStatus.FAILED
            pr.error = ProcessExitError(
                f"{project.label}: exited with code {pr.exit_code}",
                project=project,
                exit_code=pr.exit_code,
            )
            self._stop_launching(run, f"{project.label} exited with code {pr.exit_code}")
        else:
            pr.status = ProjectStatus.SUCCEEDED
            logger.info("%s exited successfully", project.label)

    async def _emit(self, run: ActiveRun, pr: ProjectRun, line: str) -> None:
        formatted = f"[{pr.project.label}] {line}"
        run.history.append(formatted)
        try:
            result = run.sink(formatted)
            if asyncio.iscoroutine(result):
                await result
        except Exception:
            logger.exception("Output sink raised for %s", pr.project.label)
