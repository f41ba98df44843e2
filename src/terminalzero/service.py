"""Application service tying the catalog, session, dispatcher and progression together."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

from .content_loader import LevelCatalog, load_levels
from .dispatcher import CommandProcessor
from .handlers import resolve_edit_content
from .models import CommandResult, EditSeed, Level
from .progress import PlayerProgress
from .session import SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnOutcome:
    """Result of one submitted command, with the text to show."""

    result: CommandResult
    text: str
    level_before: int
    level_after: int

    @property
    def advanced(self) -> bool:
        return self.level_after != self.level_before


class GameService:
    """Coordinates one player's session and progression."""

    def __init__(self, start_level: int = 1, catalog: LevelCatalog | None = None) -> None:
        """Initialize a fresh session starting at a level."""
        self.catalog = catalog if catalog is not None else load_levels()
        self.session = SessionState()
        self.processor = CommandProcessor(session=self.session, catalog=self.catalog)
        self.progress = PlayerProgress.starting_at(start_level)

    @property
    def level(self) -> int:
        return self.progress.current_level

    def level_data(self) -> Level:
        """Return metadata for the current level."""
        return self.catalog.get_level_data(self.level)

    def submit(self, command: str) -> TurnOutcome:
        """Run a command at the current level and apply any progression."""
        before = self.level
        result = self.processor.process_command(command, before, self.level_data())
        notice = self.progress.apply(result)
        text = result.output if notice is None else f"{result.output}\n\n{notice}"
        return TurnOutcome(result=result, text=text, level_before=before, level_after=self.level)

    def edit_seed(self, filename: str) -> EditSeed:
        """Return the content the editor should open with."""
        return resolve_edit_content(
            filename, self.level, self.catalog.get_level_file_system(self.level), self.session
        )

    def save_file(self, filename: str, content: str) -> TurnOutcome:
        """Save editor content through the ``save`` command."""
        if not filename or any(char.isspace() for char in filename):
            raise ValueError(f"Invalid filename: {filename!r}")
        payload = base64.b64encode(content.encode("utf-8")).decode("ascii")
        logger.debug("Saving %s (%d chars)", filename, len(content))
        return self.submit(f"save {filename} {payload}")
