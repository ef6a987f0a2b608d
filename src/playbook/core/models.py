"""Play and Project models with the shared normalization step.

Every Project that enters the system, whether read back from the store or
produced by a discovery handler, goes through normalize_project() so that
``cwd``, ``args``, ``delay`` and ``enabled`` are always present.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class Project(BaseModel):
    """One launchable unit of a play.

    Attributes:
        cwd: Working directory, relative to the playbook root ("." is the root).
        args: Arguments appended to the launch command.
        delay: Milliseconds to wait after run start before launching.
        enabled: Disabled projects are skipped at run time.
        command: Executable to launch; None means the orchestrator default.
        name: Optional display label for output lines.

    """

    model_config = ConfigDict(extra="ignore")

    cwd: str = "."
    args: list[str] = Field(default_factory=list)
    delay: int = 0
    enabled: bool = True
    command: str | None = None
    name: str | None = None

    @field_validator("cwd", mode="before")
    @classmethod
    def coerce_empty_cwd(cls, v: Any) -> str:
        """Missing or empty cwd means the root directory."""
        if v is None or v == "":
            return "."
        return str(v)

    @field_validator("args", mode="before")
    @classmethod
    def coerce_args(cls, v: Any) -> list[str]:
        """YAML parses an empty args key as None; a bare string is one argument."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(a) for a in v]

    @field_validator("delay", mode="before")
    @classmethod
    def coerce_delay(cls, v: Any) -> int:
        """Invalid, missing or negative delays collapse to 0."""
        if v is None or isinstance(v, bool):
            return 0
        try:
            delay = int(v)
        except (TypeError, ValueError, OverflowError):
            logger.debug("Ignoring invalid project delay %r", v)
            return 0
        return max(delay, 0)

    @field_validator("enabled", mode="before")
    @classmethod
    def coerce_enabled(cls, v: Any) -> bool:
        """Only a real boolean can disable a project."""
        if isinstance(v, bool):
            return v
        return True

    @property
    def label(self) -> str:
        """Label used to prefix output lines."""
        return self.name or self.cwd

    def to_payload(self) -> dict[str, Any]:
        """Serialize for storage, omitting unset optional fields."""
        return self.model_dump(exclude_none=True)


class Play(BaseModel):
    """A named, ordered collection of projects.

    The name doubles as the storage key and is never part of the stored
    payload (see to_payload()).
    """

    name: str
    projects: list[Project] = Field(default_factory=list)

    @field_validator("projects", mode="before")
    @classmethod
    def coerce_none_to_empty_list(cls, v: Any) -> list[Any]:
        if v is None:
            return []
        return list(v)

    @property
    def enabled_projects(self) -> list[Project]:
        return [p for p in self.projects if p.enabled]

    def to_payload(self) -> dict[str, Any]:
        """Serialize for storage under ``plays.<name>``."""
        return {"projects": [p.to_payload() for p in self.projects]}


def relative_cwd(cwd: str, root: Path) -> str:
    """Rewrite an absolute cwd relative to root; relative paths are kept.

    Args:
        cwd: Directory as given by the user, the store or a handler.
        root: Directory the result is made relative to.

    Returns:
        POSIX-style relative path ("." for the root itself).

    """
    if not os.path.isabs(cwd):
        return Path(cwd).as_posix()
    return Path(os.path.relpath(cwd, root)).as_posix()


def normalize_project(raw: Project | Mapping[str, Any], root: Path | None = None) -> Project:
    """Apply defaults and make cwd relative to root.

    Args:
        raw: A Project or a project-like mapping (store payload, handler output).
        root: Directory cwd is made relative to; None keeps cwd as given.

    Returns:
        A fully populated Project.

    """
    data = raw.model_dump() if isinstance(raw, Project) else dict(raw)
    cwd = data.get("cwd")
    if cwd and root is not None:
        data["cwd"] = relative_cwd(str(cwd), root)
    return Project.model_validate(data)


def normalize_play(raw: Mapping[str, Any] | None, name: str, root: Path | None = None) -> Play:
    """Build a Play from a stored payload, reconstructing the name from its key.

    Args:
        raw: Stored payload (may be None or lack ``projects``).
        name: The storage key the payload was read from.
        root: Directory project cwds are made relative to.

    Returns:
        Normalized Play.

    """
    data = dict(raw or {})
    projects = data.get("projects") or []
    return Play(name=name, projects=[normalize_project(p, root) for p in projects])
