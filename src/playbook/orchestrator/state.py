"""Run state for the process orchestrator.

The orchestrator is always in exactly one of three states, modelled as a
closed set of variants:

    Idle        no run active; run() is legal
    Running     a run is active; run() raises AlreadyRunningError
    Cancelling  cancel() was requested; teardown is in progress

Valid transitions:
    Idle → Running (on run)
    Running → Idle (on Completed or Failed)
    Running → Cancelling (on cancel)
    Cancelling → Idle (on Cancelled, after every process has exited)
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum

from playbook.core.exceptions import ProcessError
from playbook.core.models import Play, Project

Sink = Callable[[str], Awaitable[None] | None]


class RunState(StrEnum):
    """Kind tag of the orchestrator state."""

    IDLE = "idle"
    RUNNING = "running"
    CANCELLING = "cancelling"


class RunOutcome(StrEnum):
    """Terminal outcome of a run."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ProjectStatus(StrEnum):
    """Lifecycle of one project within a run.

    Valid transitions:
        PENDING → RUNNING (process spawned)
        PENDING → SKIPPED (launch stopped by failure or cancel)
        PENDING → FAILED (spawn failed)
        RUNNING → SUCCEEDED | FAILED | CANCELLED (process exited)
    """

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


@dataclass
class ProjectRun:
    """Per-project bookkeeping for one run.

    Attributes:
        project: The project being launched.
        status: Current lifecycle status.
        process: Spawned child process, None until launched.
        exit_code: Return code once the process has exited.
        error: Failure attributed to this project, if any.

    """

    project: Project
    status: ProjectStatus = ProjectStatus.PENDING
    process: asyncio.subprocess.Process | None = None
    exit_code: int | None = None
    error: ProcessError | None = None

    @property
    def is_alive(self) -> bool:
        return self.process is not None and self.process.returncode is None


@dataclass
class ActiveRun:
    """Everything owned by one in-flight run.

    Attributes:
        play: The play being executed.
        sink: Callback receiving each formatted output line.
        history: Bounded buffer of the most recent formatted lines.
        projects: One ProjectRun per enabled project, in play order.
        stop_launching: Set on failure or cancel; pending launches observe it.
        cancel_requested: True once cancel() has been called.
        started_at: Event loop time of run start; delays are measured from it.
        task: The task driving the run (the run handle).

    """

    play: Play
    sink: Sink
    history: deque[str]
    projects: list[ProjectRun] = field(default_factory=list)
    stop_launching: asyncio.Event = field(default_factory=asyncio.Event)
    cancel_requested: bool = False
    started_at: float = 0.0
    task: "asyncio.Task[RunResult] | None" = None

    @property
    def failures(self) -> list[ProcessError]:
        """Errors of failed projects, in play order."""
        return [pr.error for pr in self.projects if pr.error is not None]

    def live_processes(self) -> list[asyncio.subprocess.Process]:
        return [pr.process for pr in self.projects if pr.is_alive and pr.process is not None]


@dataclass(frozen=True)
class Idle:
    kind: RunState = RunState.IDLE


@dataclass(frozen=True)
class Running:
    run: ActiveRun
    kind: RunState = RunState.RUNNING


@dataclass(frozen=True)
class Cancelling:
    run: ActiveRun
    kind: RunState = RunState.CANCELLING


OrchestratorState = Idle | Running | Cancelling


@dataclass(frozen=True)
class RunResult:
    """Settled result of a completed or cancelled run.

    Failed runs raise RunFailedError instead of returning a result.

    Attributes:
        play_name: Name of the play that ran.
        outcome: COMPLETED or CANCELLED.
        projects: Final per-project bookkeeping.

    """

    play_name: str
    outcome: RunOutcome
    projects: tuple[ProjectRun, ...] = ()

    def to_summary(self) -> dict[str, object]:
        """Summary dict for display."""
        return {
            "play": self.play_name,
            "outcome": self.outcome.value,
            "projects": [
                {"label": pr.project.label, "status": pr.status.value, "exit_code": pr.exit_code}
                for pr in self.projects
            ],
        }
