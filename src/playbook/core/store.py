"""YAML-backed key/value store for plays and settings.

Keys are either flat (``lineLimit``) or ``<section>.<name>`` (``plays.web``).
Only the first dot separates section from name, so play names may contain
dots themselves.

The whole document is rewritten on every mutation. Single-process,
single-writer access is assumed.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_STORE_FILE = "playbook.yaml"


class ConfigStore:
    """Persistent get/set/delete/has store backed by one YAML file.

    Attributes:
        path: Location of the YAML document.

    """

    def __init__(self, path: Path) -> None:
        """Initialize store, loading the document if it exists.

        Args:
            path: YAML file to read from and write to.

        """
        self.path = path
        self._data: dict[str, Any] = {}
        self._load()

    @classmethod
    def in_directory(cls, directory: Path, filename: str = DEFAULT_STORE_FILE) -> "ConfigStore":
        """Create a store for ``directory/filename``."""
        return cls(directory / filename)

    def _load(self) -> None:
        if not self.path.exists():
            return

        try:
            with self.path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            logger.exception("Failed to load store from %s", self.path)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: top level is not a mapping", self.path)
            return
        self._data = data
        logger.debug("Loaded store %s (%d keys)", self.path, len(data))

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self._data, f, default_flow_style=False, sort_keys=False)
        logger.debug("Saved store %s", self.path)

    @staticmethod
    def _split(key: str) -> tuple[str, str | None]:
        section, sep, name = key.partition(".")
        return section, (name if sep else None)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default when absent."""
        section, name = self._split(key)
        if section not in self._data:
            return default
        value = self._data[section]
        if name is None:
            return value
        if not isinstance(value, dict) or name not in value:
            return default
        return value[name]

    def set(self, key: str, value: Any) -> None:
        """Store value under key and persist the document."""
        section, name = self._split(key)
        if name is None:
            self._data[section] = value
        else:
            bucket = self._data.get(section)
            if not isinstance(bucket, dict):
                bucket = {}
                self._data[section] = bucket
            bucket[name] = value
        self._save()

    def delete(self, key: str) -> None:
        """Remove key; deleting a missing key is a no-op."""
        if not self.has(key):
            return
        section, name = self._split(key)
        if name is None:
            del self._data[section]
        else:
            del self._data[section][name]
        self._save()

    def has(self, key: str) -> bool:
        """Check whether key is present."""
        sentinel = object()
        return self.get(key, sentinel) is not sentinel
