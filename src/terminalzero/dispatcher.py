"""Command dispatch: tokenize a line, route it, and never let an error escape."""

from __future__ import annotations

import logging

from .content_loader import LevelCatalog, load_levels
from .handlers import HANDLERS, CommandContext, Handler
from .models import MAX_LEVEL, CommandResult, Level
from .scenarios import PIPE_NOT_IMPLEMENTED, PIPELINES, check_level_completion
from .session import SessionState

SKIP_VERBS = frozenset({"mod_skip", "!skip"})
SKIP_USAGE = "[MODERATOR COMMAND] Invalid level number. Usage: mod_skip [level_number] or !skip [level_number]"

logger = logging.getLogger(__name__)


def handle_pipeline(command: str, level: int) -> CommandResult:
    """Answer the handful of two-stage pipelines the game recognizes."""
    segments = [segment.strip() for segment in command.split("|")]
    first, second = segments[0], segments[1]
    for pipeline in PIPELINES:
        if pipeline.matches(level, first, second):
            return CommandResult(pipeline.output, level_completed=True)
    logger.debug("Unsupported pipeline at level %d: %r", level, command)
    return CommandResult(PIPE_NOT_IMPLEMENTED)


def moderator_skip(args: tuple[str, ...]) -> CommandResult:
    """Jump straight to another level."""
    try:
        target = int(args[0])
    except (IndexError, ValueError):
        return CommandResult(SKIP_USAGE)
    if not 0 < target <= MAX_LEVEL:
        return CommandResult(SKIP_USAGE)
    logger.info("Moderator skip to level %d", target)
    return CommandResult(
        f"[MODERATOR COMMAND] Skipping to level {target}...",
        level_completed=True,
        skip_to_level=target,
    )


class CommandProcessor:
    """Routes command lines to handlers against one player's session."""

    def __init__(self, session: SessionState | None = None, catalog: LevelCatalog | None = None) -> None:
        """Initialize with a fresh session and the bundled catalog unless given."""
        self.session = session if session is not None else SessionState()
        self.catalog = catalog if catalog is not None else load_levels()
        self._handlers: dict[str, Handler] = dict(HANDLERS)

    def register(self, verb: str, handler: Handler) -> None:
        """Add or replace the handler for a verb."""
        self._handlers[verb.lower()] = handler

    def verbs(self) -> list[str]:
        """Return registered verbs in registration order."""
        return list(self._handlers)

    def process_command(self, command: str, level: int, level_data: Level | None = None) -> CommandResult:
        """Process one command line; always returns a result."""
        try:
            return self._dispatch(command, level, level_data)
        except Exception as exc:
            logger.exception("Error processing command %r at level %d", command, level)
            return CommandResult(f"An error occurred while processing your command: {exc}")

    def _dispatch(self, command: str, level: int, level_data: Level | None) -> CommandResult:
        self.session.record(command)
        if "|" in command:
            return handle_pipeline(command, level)

        parts = command.split()
        verb = parts[0].lower() if parts else ""
        args = tuple(parts[1:])
        logger.debug("Level %d verb=%r args=%r", level, verb, args)

        if verb in SKIP_VERBS:
            return moderator_skip(args)

        handler = self._handlers.get(verb)
        if handler is not None:
            context = CommandContext(
                verb=verb,
                args=args,
                raw=command,
                level=level,
                level_data=level_data if level_data is not None else self.catalog.get_level_data(level),
                file_system=self.catalog.get_level_file_system(level),
                session=self.session,
            )
            return handler(context)

        result = check_level_completion(verb, args, level, self.session)
        if result is not None:
            return result
        return CommandResult(f"Command not found: {verb}. Type 'help' to see available commands.")
