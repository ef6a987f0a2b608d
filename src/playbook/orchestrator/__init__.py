"""Process orchestration for playbook runs.

Public API:
    ProcessOrchestrator: Runs the enabled projects of one play at a time
    ProcessRunner: Spawns, streams and terminates child processes
    RunState, RunOutcome, ProjectStatus: State machine values
    RunResult: Settled result of a completed or cancelled run
"""

from playbook.orchestrator.orchestrator import ProcessOrchestrator
from playbook.orchestrator.process_runner import ProcessRunner
from playbook.orchestrator.state import (
    ActiveRun,
    Cancelling,
    Idle,
    ProjectRun,
    ProjectStatus,
    Running,
    RunOutcome,
    RunResult,
    RunState,
)

__all__ = [
    "ActiveRun",
    "Cancelling",
    "Idle",
    "ProcessOrchestrator",
    "ProcessRunner",
    "ProjectRun",
    "ProjectStatus",
    "RunOutcome",
    "RunResult",
    "RunState",
    "Running",
]
