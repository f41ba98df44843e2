"""Core domain models for the terminal puzzle game."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

MAX_LEVEL = 60

# Directory path -> filename -> content.
FileSystem = Mapping[str, Mapping[str, str]]


@dataclass(frozen=True)
class Level:
    """One puzzle stage with its narrative and objectives."""

    id: int
    title: str
    description: str
    track: str
    objectives: tuple[str, ...]
    hints: tuple[str, ...]
    commands: tuple[str, ...]
    success_condition: str


@dataclass(frozen=True)
class CommandResult:
    """Output of one processed command line."""

    output: str
    level_completed: bool = False
    skip_to_level: int | None = None

    def __post_init__(self) -> None:
        """Enforce the skip/completion invariant."""
        if self.skip_to_level is None:
            return
        if not self.level_completed:
            raise ValueError("skip_to_level requires level_completed.")
        if not 0 < self.skip_to_level <= MAX_LEVEL:
            raise ValueError(f"skip_to_level must be within 1..{MAX_LEVEL}, got {self.skip_to_level}.")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of statically grading a submitted script."""

    is_valid: bool
    meets_requirements: bool
    feedback: str


@dataclass(frozen=True)
class EditSeed:
    """Initial editor content for a file, or the guidance shown instead."""

    filename: str
    content: str
    blocked: str | None = None
    hint: str = ""
