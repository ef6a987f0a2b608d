"""Handler for npm package manifests."""

import json
import logging
from pathlib import Path
from typing import Any

from playbook.discovery.handlers.base import ProjectHandler

logger = logging.getLogger(__name__)

# Scripts that start a long-running process, in preference order
RUNNABLE_SCRIPTS = ("start", "serve", "dev", "watch")


class NpmPackageHandler(ProjectHandler):
    """Yields one ``npm run <script>`` project per runnable script."""

    @property
    def name(self) -> str:
        return "npm"

    @property
    def files(self) -> tuple[str, ...]:
        return ("package.json",)

    def extract(self, path: Path, content: str) -> list[dict[str, Any]]:
        manifest = json.loads(content)
        if not isinstance(manifest, dict):
            raise ValueError(f"{path} is not a JSON object")

        scripts = manifest.get("scripts") or {}
        package_name = manifest.get("name") or path.parent.name

        projects = []
        for script in RUNNABLE_SCRIPTS:
            if script in scripts:
                projects.append({
                    "cwd": str(path.parent),
                    "command": "npm",
                    "args": ["run", script],
                    "name": f"{package_name}:{script}",
                })

        logger.debug("Found %d runnable scripts in %s", len(projects), path)
        return projects
