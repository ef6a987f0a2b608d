"""Handler for .NET project files."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from playbook.discovery.handlers.base import ProjectHandler

logger = logging.getLogger(__name__)

EXECUTABLE_OUTPUT_TYPES = {"exe", "winexe"}


def _local_name(tag: str) -> str:
    # Legacy project files put every element in the msbuild namespace
    return tag.rsplit("}", 1)[-1]


class DotnetProjectHandler(ProjectHandler):
    """Yields a ``dotnet run`` project for executable C#/F# projects.

    A project is executable when it declares an ``Exe``/``WinExe`` output
    type or uses the Web SDK. Class libraries yield nothing.
    """

    @property
    def name(self) -> str:
        return "dotnet"

    @property
    def files(self) -> tuple[str, ...]:
        return ("*.csproj", "*.fsproj")

    def extract(self, path: Path, content: str) -> list[dict[str, Any]]:
        root = ET.fromstring(content)

        sdk = root.get("Sdk", "")
        output_types = {
            (el.text or "").strip().lower()
            for el in root.iter()
            if _local_name(el.tag) == "OutputType"
        }

        if not (sdk.endswith(".Web") or output_types & EXECUTABLE_OUTPUT_TYPES):
            logger.debug("Skipping non-executable project %s", path)
            return []

        return [{
            "cwd": str(path.parent),
            "command": "dotnet",
            "args": ["run"],
            "name": path.stem,
        }]
