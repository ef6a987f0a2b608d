"""Child process spawning, output streaming and termination.

Termination follows a signal-then-wait flow:
1. SIGTERM (to the whole process group on POSIX)
2. Wait termination_grace_seconds for exit
3. If still running: SIGKILL
4. Wait for the OS to reap the process
"""

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from playbook.core.exceptions import ProcessSpawnError
from playbook.core.models import Project

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"

DEFAULT_TERMINATION_GRACE = 5.0  # seconds between SIGTERM and SIGKILL
STREAM_LIMIT = 1024 * 1024  # longest line read before it is dropped


class ProcessRunner:
    """Spawns project processes and tears them down.

    Attributes:
        termination_grace_seconds: Wait between SIGTERM and SIGKILL.

    """

    def __init__(self, termination_grace_seconds: float = DEFAULT_TERMINATION_GRACE) -> None:
        self.termination_grace_seconds = termination_grace_seconds

    @staticmethod
    def build_command(project: Project, default_command: str) -> list[str]:
        """Build the argv for a project: command followed by its args."""
        return [project.command or default_command, *project.args]

    async def spawn(
        self,
        project: Project,
        cwd: Path,
        default_command: str,
    ) -> asyncio.subprocess.Process:
        """Spawn the process for a project with stdout and stderr merged.

        Args:
            project: Project to launch.
            cwd: Absolute working directory.
            default_command: Executable used when the project has none.

        Returns:
            The running process.

        Raises:
            ProcessSpawnError: If the executable or cwd is missing or not usable.

        """
        cmd = self.build_command(project, default_command)
        logger.info("Spawning %s in %s: %s", project.label, cwd, " ".join(cmd))

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                limit=STREAM_LIMIT,
                start_new_session=not IS_WINDOWS,
            )
        except OSError as e:
            logger.error("Failed to spawn %s: %s", project.label, e)
            raise ProcessSpawnError(f"{project.label}: failed to start {cmd[0]!r}: {e}", project=project) from e

        logger.debug("Spawned %s (PID %d)", project.label, process.pid)
        return process

    async def stream_lines(
        self,
        process: asyncio.subprocess.Process,
        on_line: Callable[[str], Awaitable[None]],
    ) -> None:
        """Read process output line by line until EOF.

        Args:
            process: Process whose stdout is a pipe.
            on_line: Awaited for each decoded line, in emission order.

        """
        if process.stdout is None:
            return

        while True:
            try:
                raw = await process.stdout.readline()
            except ValueError:
                # Line exceeded STREAM_LIMIT; the reader already discarded it
                logger.debug("Dropped over-long output line from PID %d", process.pid)
                continue
            if not raw:
                break
            await on_line(raw.decode("utf-8", errors="replace").rstrip("\r\n"))

    def _signal(self, process: asyncio.subprocess.Process, sig: signal.Signals) -> None:
        try:
            if IS_WINDOWS:
                if sig == signal.SIGTERM:
                    process.terminate()
                else:
                    process.kill()
            else:
                os.killpg(process.pid, sig)
        except (ProcessLookupError, PermissionError):
            # Already exited; macOS reports EPERM for a group of zombies
            logger.debug("PID %d already gone before %s", process.pid, sig.name)

    async def terminate(self, process: asyncio.subprocess.Process) -> int:
        """Stop a process and wait until it has exited.

        Args:
            process: Process to stop.

        Returns:
            The process return code.

        """
        if process.returncode is not None:
            return process.returncode

        logger.info("Sending SIGTERM to PID %d", process.pid)
        self._signal(process, signal.SIGTERM)

        try:
            return await asyncio.wait_for(process.wait(), timeout=self.termination_grace_seconds)
        except TimeoutError:
            logger.warning(
                "PID %d still running after %.1fs, sending SIGKILL",
                process.pid,
                self.termination_grace_seconds,
            )

        self._signal(process, getattr(signal, "SIGKILL", signal.SIGTERM))
        return await process.wait()
