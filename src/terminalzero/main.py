"""CLI entrypoint for the Terminal Zero shell."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable

from .models import MAX_LEVEL
from .service import GameService

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]

PROMPT = "user@terminal-zero:~$ "
EDIT_PROMPT = "edit> "
WELCOME = ("Welcome to Terminal Zero v1.0", "Type 'help' to see available commands")
QUIT_COMMANDS = {"exit", "quit"}
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

EDITOR_HELP = (
    "- edit:N:content - Edit line N with new content",
    "- edit:N - Show line N for editing",
    "- list - Show all lines with numbers",
    "- save - Save changes and exit",
    "- exit - Exit without saving",
)


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG when verbose."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


def _service(start_level: int) -> GameService:
    """Create a game service for one player."""
    return GameService(start_level=start_level)


def _level(value: str) -> int:
    level = int(value)
    if not 0 < level <= MAX_LEVEL:
        raise argparse.ArgumentTypeError(f"level must be between 1 and {MAX_LEVEL}")
    return level


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="terminalzero", description="Terminal hacking puzzle game")
    parser.add_argument("command", nargs="?", default="play", choices=["play"])
    parser.add_argument("--level", type=_level, default=1, help=f"starting level (1-{MAX_LEVEL})")
    parser.add_argument("--verbose", "-v", action="store_true", help="log debug output to stderr")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    return play_shell(start_level=args.level)


def play_shell(input_fn: InputFn = input, print_fn: PrintFn = print, *, start_level: int = 1) -> int:
    """Run the interactive shell until the player quits."""
    service = _service(start_level)
    for line in WELCOME:
        print_fn(line)
    _print_banner(service, print_fn)

    while True:
        try:
            line = input_fn(PROMPT)
        except (EOFError, KeyboardInterrupt):
            print_fn("")
            return 0
        command = line.strip()
        if command.lower() in QUIT_COMMANDS:
            print_fn("Goodbye.")
            return 0

        filename = _edit_target(command)
        if filename is not None:
            seed = service.edit_seed(filename)
            if seed.blocked is not None:
                print_fn(seed.blocked)
                continue
            _editor_flow(service, filename, seed.content, input_fn, print_fn, hint=seed.hint)
            continue

        outcome = service.submit(command)
        print_fn(outcome.text)
        if outcome.advanced:
            _print_banner(service, print_fn)


def _print_banner(service: GameService, print_fn: PrintFn) -> None:
    level = service.level_data()
    progress = service.progress
    print_fn(f"\n=== Level {level.id}: {level.title} ===")
    print_fn(f"Track: {level.track} | XP: {progress.xp} | Rank: {progress.rank}")
    print_fn(level.description)


def _edit_target(command: str) -> str | None:
    """Return the filename of an ``edit``/``sudo edit`` command, if any."""
    parts = command.split()
    if len(parts) >= 2 and parts[0].lower() == "edit":
        return parts[1]
    if len(parts) >= 3 and parts[0].lower() == "sudo" and parts[1] == "edit":
        return parts[2]
    return None


def _listing(filename: str, lines: list[str]) -> str:
    rows = [f"Current content of {filename}:"]
    rows.extend(f"{number}: {text}" for number, text in enumerate(lines, start=1))
    return "\n".join(rows)


def _editor_flow(
    service: GameService, filename: str, content: str, input_fn: InputFn, print_fn: PrintFn, *, hint: str = ""
) -> None:
    """Line-based editor: list, edit lines, then save or discard."""
    lines = content.split("\n")
    print_fn(f"Editing {filename}. Available commands:")
    for row in EDITOR_HELP:
        print_fn(row)
    print_fn(_listing(filename, lines))
    if hint:
        print_fn(hint.strip())

    pending_line = 0
    while True:
        try:
            command = input_fn(EDIT_PROMPT)
        except (EOFError, KeyboardInterrupt):
            print_fn("Exited editor without saving changes.")
            return
        lowered = command.strip().lower()

        if lowered == "save":
            outcome = service.save_file(filename, "\n".join(lines))
            print_fn(outcome.text)
            if outcome.advanced:
                _print_banner(service, print_fn)
            return
        if lowered == "exit":
            print_fn("Exited editor without saving changes.")
            return
        if lowered == "list":
            print_fn(_listing(filename, lines))
            continue
        if lowered.startswith("edit:"):
            parts = command.strip().split(":")
            try:
                number = int(parts[1])
            except ValueError:
                number = 0
            if not 1 <= number <= len(lines):
                print_fn(f"Invalid line number. Use a number between 1 and {len(lines)}.")
                continue
            if len(parts) > 2:
                lines[number - 1] = ":".join(parts[2:])
                print_fn(f"Line {number} updated.")
            else:
                print_fn(f"Line {number}: {lines[number - 1]}")
                pending_line = number
            continue
        if pending_line:
            lines[pending_line - 1] = command
            print_fn(f"Line {pending_line} updated.")
            pending_line = 0
            continue
        print_fn("Unknown editor command. Use edit:N, edit:N:content, list, save or exit.")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
