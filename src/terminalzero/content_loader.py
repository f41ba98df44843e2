"""Load the level catalog and static file systems from bundled JSON resources."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .models import MAX_LEVEL, FileSystem, Level

CONTENT_PACKAGE = "terminalzero.content"
LEVELS_FILE = "levels.json"
FILESYSTEMS_FILE = "filesystems.json"

DEFAULT_FILE_SYSTEM: FileSystem = MappingProxyType(
    {"/": MappingProxyType({"readme.txt": "This level has not been implemented yet."})}
)

logger = logging.getLogger(__name__)


class LevelCatalog:
    """Read-only lookup of level metadata and per-level static file systems."""

    def __init__(
        self,
        levels: Mapping[int, Level],
        file_systems: Mapping[int, FileSystem],
        tracks: tuple[str, ...] = (),
    ) -> None:
        """Initialize catalog from already validated content."""
        self._levels = dict(levels)
        self._file_systems = dict(file_systems)
        self._tracks = tracks

    def __contains__(self, level: object) -> bool:
        return level in self._levels

    def __len__(self) -> int:
        return len(self._levels)

    def get_level_data(self, level: int) -> Level:
        """Return level metadata, or a placeholder for levels with no content."""
        found = self._levels.get(level)
        if found is not None:
            return found
        return _unknown_level(level)

    def require(self, level: int) -> Level:
        """Return level metadata for a defined level."""
        if level not in self._levels:
            raise KeyError(level)
        return self._levels[level]

    def get_level_file_system(self, level: int) -> FileSystem:
        """Return the static file system for a level."""
        return self._file_systems.get(level, DEFAULT_FILE_SYSTEM)

    def tracks(self) -> tuple[str, ...]:
        """Return track names in play order."""
        return self._tracks

    def levels_by_track(self, track: str) -> list[Level]:
        """Return the levels that belong to one track, ordered by id."""
        return [level for _, level in sorted(self._levels.items()) if level.track == track]


def _unknown_level(level: int) -> Level:
    return Level(
        id=level,
        title="Unknown Level",
        description="This level has not been implemented yet.",
        track="Unknown",
        objectives=("No objectives defined",),
        hints=("No hints available",),
        commands=("help", "ls", "cat", "clear"),
        success_condition="Unknown",
    )


def _string_list(raw: dict[str, Any], key: str, level_id: object) -> tuple[str, ...]:
    value = raw.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"Level '{level_id}' field '{key}' must be a list of strings.")
    return tuple(value)


def _level_from_dict(raw: dict[str, Any]) -> Level:
    """Build a level from raw JSON content."""
    level_id = raw.get("id")
    if not isinstance(level_id, int) or isinstance(level_id, bool) or level_id <= 0:
        raise ValueError(f"Level has invalid id: {level_id!r}")
    title = str(raw.get("title", "")).strip()
    if not title:
        raise ValueError(f"Level '{level_id}' has no title.")

    return Level(
        id=level_id,
        title=title,
        description=str(raw.get("description", "")),
        track=str(raw.get("track", "")),
        objectives=_string_list(raw, "objectives", level_id),
        hints=_string_list(raw, "hints", level_id),
        commands=_string_list(raw, "commands", level_id),
        success_condition=str(raw.get("success_condition", "")),
    )


def _file_system_from_dict(level_id: int, raw: object) -> FileSystem:
    """Build a read-only file system from raw JSON content."""
    if not isinstance(raw, dict):
        raise ValueError(f"File system for level {level_id} must be an object.")
    directories: dict[str, Mapping[str, str]] = {}
    for path, files in raw.items():
        if not isinstance(files, dict) or not all(
            isinstance(name, str) and isinstance(content, str) for name, content in files.items()
        ):
            raise ValueError(f"Directory '{path}' for level {level_id} must map file names to strings.")
        directories[str(path)] = MappingProxyType(dict(files))
    return MappingProxyType(directories)


def _catalog_from_raw(levels_raw: dict[str, Any], file_systems_raw: dict[str, Any]) -> LevelCatalog:
    levels: dict[int, Level] = {}
    for item in levels_raw.get("levels", []):
        level = _level_from_dict(item)
        if level.id in levels:
            raise ValueError(f"Duplicate level id: {level.id}")
        levels[level.id] = level

    file_systems: dict[int, FileSystem] = {}
    for item in file_systems_raw.get("filesystems", []):
        level_id = item.get("level")
        if level_id not in levels:
            raise ValueError(f"File system refers to unknown level '{level_id}'.")
        if level_id in file_systems:
            raise ValueError(f"Duplicate file system for level {level_id}")
        file_systems[level_id] = _file_system_from_dict(level_id, item.get("directories"))

    tracks = tuple(str(track) for track in levels_raw.get("tracks", []))
    _validate_level_range(levels)
    _validate_tracks(levels, tracks)
    logger.debug("Loaded %d levels and %d file systems", len(levels), len(file_systems))
    return LevelCatalog(levels, file_systems, tracks)


def load_levels() -> LevelCatalog:
    """Load the bundled level catalog."""
    root = resources.files(CONTENT_PACKAGE)
    levels_raw = json.loads(root.joinpath(LEVELS_FILE).read_text(encoding="utf-8-sig"))
    file_systems_raw = json.loads(root.joinpath(FILESYSTEMS_FILE).read_text(encoding="utf-8-sig"))
    return _catalog_from_raw(levels_raw, file_systems_raw)


def load_levels_from_dir(path: Path) -> LevelCatalog:
    """Load a level catalog from a directory for tests/tools."""
    levels_raw = json.loads((path / LEVELS_FILE).read_text(encoding="utf-8-sig"))
    fs_path = path / FILESYSTEMS_FILE
    file_systems_raw: dict[str, Any] = {}
    if fs_path.exists():
        file_systems_raw = json.loads(fs_path.read_text(encoding="utf-8-sig"))
    return _catalog_from_raw(levels_raw, file_systems_raw)


def _validate_level_range(levels: dict[int, Level]) -> None:
    """Validate that every level id fits the playable range."""
    for level_id in levels:
        if level_id > MAX_LEVEL:
            raise ValueError(f"Level id {level_id} exceeds maximum level {MAX_LEVEL}.")


def _validate_tracks(levels: dict[int, Level], tracks: tuple[str, ...]) -> None:
    """Validate that levels only reference declared tracks."""
    if not tracks:
        return
    for level in levels.values():
        if level.track not in tracks:
            raise ValueError(f"Level {level.id} has unknown track '{level.track}'.")
