"""CRUD over plays stored in a ConfigStore.

Plays live under ``plays.<name>``; the payload never repeats the name.
Projects are normalized on every read and write.
"""

import logging
from pathlib import Path

from playbook.core.config import PlaybookSettings, coerce_line_limit
from playbook.core.exceptions import PlayAlreadyExistsError
from playbook.core.models import Play, normalize_play, normalize_project
from playbook.core.store import ConfigStore

logger = logging.getLogger(__name__)

PLAYS_SECTION = "plays"


def play_key(name: str) -> str:
    """Storage key for a play name."""
    return f"{PLAYS_SECTION}.{name}"


class PlayService:
    """Create, read, update and delete plays; get and set the line limit.

    Attributes:
        store: Backing key/value store.
        root: Directory project cwds are made relative to.

    """

    def __init__(self, store: ConfigStore, root: Path) -> None:
        self.store = store
        self.root = root

    def get_all(self) -> list[Play]:
        plays = self.store.get(PLAYS_SECTION) or {}
        return [normalize_play(payload, name, self.root) for name, payload in plays.items()]

    def get(self, name: str) -> Play | None:
        """Return the named play, or None when it does not exist."""
        if not self.store.has(play_key(name)):
            return None
        return normalize_play(self.store.get(play_key(name)), name, self.root)

    def exists(self, name: str) -> bool:
        return self.store.has(play_key(name))

    def create(self, name: str) -> Play:
        """Create and persist an empty play.

        Raises:
            ValueError: If name is blank.
            PlayAlreadyExistsError: If a play with this name exists.

        """
        if not name or not name.strip():
            raise ValueError("Play name must not be empty")
        if self.exists(name):
            raise PlayAlreadyExistsError(name)

        play = normalize_play(None, name, self.root)
        logger.info("Creating play %s", name)
        return self.save(play)

    def save(self, play: Play) -> Play:
        """Upsert the play's projects under its name."""
        play.projects = [normalize_project(p, self.root) for p in play.projects]
        self.store.set(play_key(play.name), play.to_payload())
        logger.debug("Saved play %s (%d projects)", play.name, len(play.projects))
        return play

    def delete(self, play: Play | str) -> None:
        """Remove a play; deleting a missing play is a no-op."""
        name = play if isinstance(play, str) else play.name
        self.store.delete(play_key(name))
        logger.info("Deleted play %s", name)

    @property
    def line_limit(self) -> int:
        """Output line cap; invalid or non-positive stored values read as 1."""
        return coerce_line_limit(self.store.get(PlaybookSettings.LINE_LIMIT))

    @line_limit.setter
    def line_limit(self, value: object) -> None:
        self.store.set(PlaybookSettings.LINE_LIMIT, coerce_line_limit(value))
