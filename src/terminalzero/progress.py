"""In-memory player progression: level, XP and rank."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .models import MAX_LEVEL, CommandResult

XP_PER_LEVEL = 10

# Highest level (inclusive) for each rank, in ascending order.
RANKS: tuple[tuple[int, str], ...] = (
    (10, "Novice"),
    (20, "Apprentice"),
    (30, "Hacker"),
    (40, "Cyber Specialist"),
    (50, "Master Hacker"),
    (MAX_LEVEL, "Elite Hacker"),
)

logger = logging.getLogger(__name__)


def rank_for_level(level: int) -> str:
    """Return the rank title earned by reaching a level."""
    for ceiling, title in RANKS:
        if level <= ceiling:
            return title
    return RANKS[-1][1]


def xp_for_level(level: int) -> int:
    """Return the XP of a player who has just reached a level."""
    return (level - 1) * XP_PER_LEVEL


@dataclass
class PlayerProgress:
    """Current level, XP and completed levels for one player."""

    current_level: int = 1
    xp: int = 0
    completed_levels: set[int] = field(default_factory=set)

    def __post_init__(self) -> None:
        """Validate the starting level."""
        if not 0 < self.current_level <= MAX_LEVEL:
            raise ValueError(f"Level must be within 1..{MAX_LEVEL}, got {self.current_level}.")

    @classmethod
    def starting_at(cls, level: int) -> PlayerProgress:
        """Create progress as if every earlier level had been completed."""
        return cls(current_level=level, xp=xp_for_level(level), completed_levels=set(range(1, level)))

    @property
    def rank(self) -> str:
        return rank_for_level(self.current_level)

    @property
    def progress_percent(self) -> float:
        return self.current_level / MAX_LEVEL * 100

    @property
    def finished(self) -> bool:
        return MAX_LEVEL in self.completed_levels

    def apply(self, result: CommandResult) -> str | None:
        """Advance after a command; return the progression notice, if any."""
        if result.skip_to_level is not None:
            target = result.skip_to_level
            self.current_level = target
            self.xp = xp_for_level(target)
            logger.info("Skipped to level %d", target)
            return f"You've been granted access to level {target}."

        if not result.level_completed:
            return None

        completed = self.current_level
        self.completed_levels.add(completed)
        self.xp += XP_PER_LEVEL
        if completed >= MAX_LEVEL:
            logger.info("Final level %d completed", completed)
            return f"You've completed level {completed}. You've finished every level!"
        self.current_level = completed + 1
        logger.info("Level %d completed; now on %d (%s)", completed, self.current_level, self.rank)
        return f"You've completed level {completed}. Moving to level {self.current_level}."
