"""Directory walker for project discovery using iterative BFS."""

import logging
import os
from collections import deque
from collections.abc import Callable, Generator, Iterable
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class FilesystemInterface(Protocol):
    """Protocol for filesystem operations to enable dependency injection."""

    def scandir(self, path: Path) -> Generator[os.DirEntry[str], None, None]:
        """Scan directory and yield its entries.

        Args:
            path: Directory path to scan

        Yields:
            DirEntry objects for each entry in the directory

        """
        ...


class RealFilesystem:
    """Real filesystem implementation using os module."""

    def scandir(self, path: Path) -> Generator[os.DirEntry[str], None, None]:
        """Scan directory using os.scandir; unreadable directories yield nothing."""
        try:
            with os.scandir(path) as it:
                yield from it
        except OSError as e:
            logger.warning("Cannot scan directory %s: %s", path, e)


class FileWalker:
    """Iterative BFS walker yielding candidate files.

    Excluded directory names are pruned at any depth. Symlinked directories
    are not descended into, and real paths are tracked to avoid loops.
    """

    def __init__(
        self,
        excluded_dirs: Iterable[str],
        accept: Callable[[str], bool] | None = None,
        filesystem: FilesystemInterface | None = None,
    ) -> None:
        """Initialize the walker.

        Args:
            excluded_dirs: Directory names never descended into.
            accept: Predicate on a file's base name; None accepts every file.
            filesystem: Optional filesystem implementation for testing.

        """
        self.excluded_dirs = frozenset(excluded_dirs)
        self.accept = accept
        self.filesystem = filesystem if filesystem is not None else RealFilesystem()

    def walk(self, root: Path) -> Generator[Path, None, None]:
        """Walk root and yield accepted files.

        Directories are visited breadth first; within a directory, files are
        yielded in name order and subdirectories queued in name order.

        Yields:
            Absolute paths of accepted files.

        """
        visited: set[Path] = set()
        queue: deque[Path] = deque([root.resolve()])

        while queue:
            dir_path = queue.popleft()

            try:
                real_path = dir_path.resolve()
            except (OSError, RuntimeError) as e:
                logger.warning("Cannot resolve path %s: %s", dir_path, e)
                continue
            if real_path in visited:
                continue
            visited.add(real_path)

            files: list[Path] = []
            subdirs: list[Path] = []
            for entry in self.filesystem.scandir(dir_path):
                try:
                    if entry.is_dir(follow_symlinks=False):
                        if entry.name in self.excluded_dirs:
                            logger.debug("Skipping excluded directory %s", entry.path)
                            continue
                        subdirs.append(Path(entry.path))
                    elif entry.is_file(follow_symlinks=False):
                        if self.accept is None or self.accept(entry.name):
                            files.append(Path(entry.path))
                except OSError as e:
                    logger.debug("Error processing entry %s: %s", entry.path, e)

            yield from sorted(files, key=lambda p: p.name)
            queue.extend(sorted(subdirs, key=lambda p: p.name))
