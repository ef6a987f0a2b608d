"""Abstract base class for project discovery handlers.

A handler recognizes file names by glob and turns a file's content into
zero or more project definitions.

Usage:
    from playbook.discovery.handlers.base import ProjectHandler

    class MyHandler(ProjectHandler):
        @property
        def name(self) -> str:
            return "my_handler"

        @property
        def files(self) -> tuple[str, ...]:
            return ("*.myproj",)

        def extract(self, path, content):
            return [{"cwd": str(path.parent), "command": "my-tool"}]
"""

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any

from pathspec import GitIgnoreSpec


class ProjectHandler(ABC):
    """Abstract base class for discovery handlers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the handler identifier used in logs and errors."""
        ...

    @property
    @abstractmethod
    def files(self) -> tuple[str, ...]:
        """Return the glob patterns matched against file base names.

        Returns:
            Tuple of glob patterns (e.g. ``("package.json",)``).

        """
        ...

    @abstractmethod
    def extract(self, path: Path, content: str) -> list[dict[str, Any]]:
        """Extract project definitions from a matching file.

        Args:
            path: Absolute path to the file.
            content: Decoded file content.

        Returns:
            Project-like mappings. ``cwd`` may be absolute or omitted, in
            which case the file's directory is used.

        Raises:
            Any exception on malformed content; discovery records it and
            moves on to the next file.

        """
        ...

    @cached_property
    def _spec(self) -> GitIgnoreSpec:
        return GitIgnoreSpec.from_lines(self.files)

    def matches(self, filename: str) -> bool:
        """Check whether a base name matches any of this handler's globs."""
        return self._spec.match_file(filename)
