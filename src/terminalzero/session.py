"""Per-session mutable state: user files, environment and level flags."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Prerequisite flags tracked per level; every flag starts unset.
LEVEL_FLAGS: dict[int, tuple[str, ...]] = {
    3: ("permissionsChanged",),
    4: ("scriptExecutable",),
    5: ("archiveExtracted",),
    6: ("fileFound",),
    8: ("lsRun",),
    10: ("scriptEdited",),
    12: ("dataJsonViewed",),
    13: ("textFileViewed",),
    60: ("stegoPasswordFound",),
}


class FileStore:
    """In-memory store of files the user created or edited this session."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._files: dict[str, str] = {}

    def set(self, filename: str, content: str | None) -> None:
        """Save content under a filename, replacing any previous version."""
        if not filename:
            raise ValueError("Filename is required.")
        if content is None:
            logger.warning("Saving missing content to %s as an empty file", filename)
            content = ""
        self._files[filename] = content
        logger.debug("Saved %s (%d chars); files: %s", filename, len(content), ", ".join(self._files))

    def get(self, filename: str) -> str | None:
        """Return file content, or None when the file was never saved."""
        if not filename:
            return None
        content = self._files.get(filename)
        logger.debug("Lookup %s: %s", filename, "found" if content is not None else "not found")
        return content

    def exists(self, filename: str) -> bool:
        """Return whether a file has been saved."""
        return bool(filename) and filename in self._files

    def list(self) -> list[str]:
        """Return saved filenames in save order."""
        return list(self._files)

    def delete(self, filename: str) -> bool:
        """Delete a saved file; return whether it existed."""
        if not filename or filename not in self._files:
            return False
        del self._files[filename]
        logger.debug("Deleted %s", filename)
        return True

    def __contains__(self, filename: object) -> bool:
        return isinstance(filename, str) and self.exists(filename)

    def __len__(self) -> int:
        return len(self._files)


def _initial_level_state() -> dict[int, dict[str, bool]]:
    return {level: {name: False for name in names} for level, names in LEVEL_FLAGS.items()}


@dataclass
class SessionState:
    """Everything one player's commands can read or mutate.

    Flags in ``level_state`` only ever move from False to True; nothing in a
    session resets them.
    """

    current_directory: str = "/"
    environment_variables: dict[str, str] = field(default_factory=dict)
    files: FileStore = field(default_factory=FileStore)
    command_history: list[str] = field(default_factory=list)
    level_state: dict[int, dict[str, bool]] = field(default_factory=_initial_level_state)

    def flag(self, level: int, name: str) -> bool:
        """Return a prerequisite flag, False when never recorded."""
        return self.level_state.get(level, {}).get(name, False)

    def set_flag(self, level: int, name: str) -> None:
        """Mark a prerequisite step as performed."""
        flags = self.level_state.setdefault(level, {})
        if not flags.get(name, False):
            logger.debug("Level %d flag %s set", level, name)
        flags[name] = True

    def record(self, command: str) -> None:
        """Append a raw command line to the history."""
        self.command_history.append(command)
