"""Handlers for the built-in shell verbs.

Every handler takes a ``CommandContext`` and returns a ``CommandResult``.
Handlers never raise for bad user input; usage and guidance messages are
ordinary output.
"""

from __future__ import annotations

import base64
import binascii
import logging
import posixpath
import re
from collections.abc import Callable
from dataclasses import dataclass

from .models import CommandResult, EditSeed, FileSystem, Level
from .scenarios import (
    BASE_ENVIRONMENT,
    CHMOD_RULES,
    CURL_RULES,
    CURL_USAGE,
    DEFAULT_PERMISSIONS,
    EDIT_HINTS,
    ENV_RULES,
    EXTRACTED_FILES,
    FIND_RULES,
    GREP_RULES,
    HELP_COMMANDS,
    HELP_HINTS,
    LS_UNLOCKS,
    MODERATOR_HELP,
    NODE_RUNS,
    PERMISSIONS,
    PYTHON_RUNS,
    SAVE_TRIGGERS,
    SCRIPT_LEVELS,
    SCRIPT_RULES,
    SSH_RULES,
    SSH_USAGE,
    STRINGS_RULES,
    STRINGS_USAGE,
    TAR_RULES,
    TAR_USAGE,
    UNSAVED_NODE_RUNS,
    WC_RULES,
    WC_USAGE,
    CannedRun,
    ScriptLevel,
    find_cat_rule,
    find_edit_template,
    find_run,
    run_rules,
)
from .session import SessionState
from .validator import validate_level_solution

logger = logging.getLogger(__name__)

_EXPORT_PATTERN = re.compile(r"^([^=]+)=(.*)$")
_VARIABLE_PATTERN = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")
_ADD_CALL = re.compile(r"console\.log\(\s*add\(\s*(-?\d+)\s*,\s*(-?\d+)\s*\)\s*\)")


@dataclass(frozen=True)
class CommandContext:
    """Everything a handler needs to answer one command."""

    verb: str
    args: tuple[str, ...]
    raw: str
    level: int
    level_data: Level
    file_system: FileSystem
    session: SessionState


Handler = Callable[[CommandContext], CommandResult]


def _say(output: str) -> CommandResult:
    return CommandResult(output)


def decode_payload(payload: str) -> str:
    """Decode editor content sent as base64, falling back to the raw text."""
    try:
        return base64.b64decode(payload, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        pass
    try:
        padded = payload + "=" * (-len(payload) % 4)
        return base64.urlsafe_b64decode(padded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.warning("Save payload is not base64; storing it as plain text")
        return payload


def normalize_path(path: str) -> str:
    """Spell a path one way: bare name for root files, ``/dir/name`` otherwise."""
    if "/" not in path:
        return path
    absolute = posixpath.normpath("/" + path.lstrip("/"))
    directory, name = posixpath.split(absolute)
    if directory == "/" and name:
        return name
    return absolute


def lookup_static(file_system: FileSystem, path: str) -> str | None:
    """Return static file content for a root name or a ``dir/name`` path."""
    root = file_system.get("/", {})
    if path in root:
        return root[path]
    directory, _, name = path.rpartition("/")
    if not name:
        return None
    if not directory.startswith("/"):
        directory = "/" + directory
    files = file_system.get(directory)
    if files is None:
        return None
    return files.get(name)


def resolve_edit_content(
    filename: str, level: int, file_system: FileSystem, session: SessionState
) -> EditSeed:
    """Pick the editor's starting content: saved file, static file, then level template."""
    hint = EDIT_HINTS.get((level, filename), "")
    saved = session.files.get(filename)
    if saved:
        return EditSeed(filename, saved, hint=hint)
    static = file_system.get("/", {}).get(filename)
    if static:
        return EditSeed(filename, static, hint=hint)
    template = find_edit_template(level, filename)
    if template is None:
        return EditSeed(filename, "", hint=hint)
    if template.requires is not None and not session.flag(level, template.requires):
        return EditSeed(filename, "", blocked=template.blocked)
    return EditSeed(filename, template.content, hint=hint)


def handle_save(ctx: CommandContext) -> CommandResult:
    if len(ctx.args) < 2:
        return _say("Invalid save command format")
    filename = ctx.args[0]
    content = decode_payload(" ".join(ctx.args[1:]))
    ctx.session.files.set(filename, content)

    compact = "".join(content.split())
    for trigger in SAVE_TRIGGERS:
        if trigger.level == ctx.level and trigger.filename == filename and trigger.marker in compact:
            ctx.session.set_flag(ctx.level, trigger.unlocks)
    return _say(f"File {filename} saved successfully.")


def handle_help(ctx: CommandContext) -> CommandResult:
    lines = ["Available commands:"]
    lines.extend(f"  {name} - {summary}" for name, summary in HELP_COMMANDS)
    lines.append("")
    lines.append(f"Level {ctx.level}: {ctx.level_data.title}")
    lines.append(ctx.level_data.description)
    lines.append("")
    lines.append("Objectives:")
    lines.extend(f"- {objective}" for objective in ctx.level_data.objectives)

    hints = HELP_HINTS.get(ctx.level)
    if hints:
        lines.append("")
        lines.extend(hints)
    if "--mod" in ctx.raw or "--admin" in ctx.raw:
        lines.append("")
        lines.extend(MODERATOR_HELP)
    return _say("\n".join(lines) + "\n")


def _permissions(ctx: CommandContext, filename: str) -> str:
    override = PERMISSIONS.get((ctx.level, filename))
    if override is None:
        return DEFAULT_PERMISSIONS
    flag, before, after = override
    return after if ctx.session.flag(ctx.level, flag) else before


def handle_ls(ctx: CommandContext) -> CommandResult:
    unlocks = LS_UNLOCKS.get(ctx.level)
    if unlocks is not None:
        ctx.session.set_flag(ctx.level, unlocks)

    show_hidden = "-a" in ctx.args or "--all" in ctx.args
    long_format = "-l" in ctx.args
    path = "/"
    for arg in ctx.args:
        if not arg.startswith("-"):
            path = arg

    directory = ctx.file_system.get(path)
    if directory is None:
        return _say(f"ls: cannot access '{path}': No such file or directory")

    files = [name for name in directory if show_hidden or not name.startswith(".")]
    if path == "/":
        extracted = EXTRACTED_FILES.get(ctx.level)
        if extracted is not None and ctx.session.flag(ctx.level, extracted[0]):
            files.append(extracted[1])
        for name in ctx.session.files.list():
            if name not in files and (show_hidden or not name.startswith(".")):
                files.append(name)

    if not long_format:
        return _say("\n".join(files))
    lines = [f"total {len(files)}"]
    lines.extend(f"{_permissions(ctx, name)} 1 user group 4096 May 5 14:30 {name}" for name in files)
    return _say("\n".join(lines) + "\n")


def handle_cat(ctx: CommandContext) -> CommandResult:
    if not ctx.args:
        return _say("Usage: cat [filename]\nDisplays the contents of a file.")
    filename = ctx.args[0]

    saved = ctx.session.files.get(filename)
    if saved:
        return _say(saved)

    path = normalize_path(filename)
    cat_rule = find_cat_rule(ctx.level, path)
    if cat_rule is not None and cat_rule.requires is not None and not ctx.session.flag(ctx.level, cat_rule.requires):
        return _say(cat_rule.blocked)

    content = cat_rule.content if cat_rule is not None and cat_rule.content is not None else None
    if content is None:
        content = lookup_static(ctx.file_system, path)
    if content is None:
        return _say(f"cat: {filename}: No such file or directory")
    if cat_rule is None:
        return _say(content)

    if cat_rule.unlocks is not None:
        ctx.session.set_flag(ctx.level, cat_rule.unlocks)
    return CommandResult(content + cat_rule.suffix, level_completed=cat_rule.completes)


def handle_echo(ctx: CommandContext) -> CommandResult:
    variables = {**BASE_ENVIRONMENT, **ctx.session.environment_variables}
    text = " ".join(ctx.args)
    return _say(_VARIABLE_PATTERN.sub(lambda match: variables.get(match.group(1), ""), text))


def handle_clear(ctx: CommandContext) -> CommandResult:
    # The terminal itself clears the screen.
    return _say("Terminal cleared")


def handle_script(ctx: CommandContext) -> CommandResult:
    result = run_rules(SCRIPT_RULES, ctx.verb, ctx.args, ctx.level, ctx.session)
    return result or _say("No such file or permission denied")


def handle_chmod(ctx: CommandContext) -> CommandResult:
    if len(ctx.args) < 2:
        return _say("Usage: chmod [permissions] [filename]\nChanges the permissions of a file.\nExample: chmod +x script.sh")
    filename = ctx.args[1]
    if filename not in ctx.file_system.get("/", {}):
        return _say(f"chmod: cannot access '{filename}': No such file or directory")
    result = run_rules(CHMOD_RULES, ctx.verb, ctx.args, ctx.level, ctx.session)
    return result or _say(f"chmod: changed permissions of '{filename}'")


def handle_find(ctx: CommandContext) -> CommandResult:
    result = run_rules(FIND_RULES, ctx.verb, ctx.args, ctx.level, ctx.session)
    return result or _say(
        "No matching files found. Try using 'find / -name secret*' to search for files with 'secret' in their name."
    )


def handle_grep(ctx: CommandContext) -> CommandResult:
    if len(ctx.args) < 2:
        return _say("Usage: grep [pattern] [filename]\nSearches for a pattern in a file.\nExample: grep password logs.txt")
    result = run_rules(GREP_RULES, ctx.verb, ctx.args, ctx.level, ctx.session)
    return result or _say("No matches found. Try searching for 'password' in different files.")


def handle_tar(ctx: CommandContext) -> CommandResult:
    return run_rules(TAR_RULES, ctx.verb, ctx.args, ctx.level, ctx.session) or _say(TAR_USAGE)


def handle_env(ctx: CommandContext) -> CommandResult:
    result = run_rules(ENV_RULES, ctx.verb, ctx.args, ctx.level, ctx.session)
    if result is not None:
        return result
    variables = {**BASE_ENVIRONMENT, **ctx.session.environment_variables}
    return _say("\n".join(f"{name}={value}" for name, value in variables.items()))


def handle_export(ctx: CommandContext) -> CommandResult:
    if not ctx.args:
        return _say("Usage: export NAME=VALUE\nSets an environment variable.\nExample: export DEBUG=true")
    match = _EXPORT_PATTERN.match(ctx.args[0])
    if match is None:
        return _say("Invalid export syntax. Use: export NAME=VALUE")
    name, value = match.groups()
    ctx.session.environment_variables[name] = value
    return _say(f"Environment variable {name} set to {value}")


def handle_edit(ctx: CommandContext) -> CommandResult:
    """Handle ``edit <file>`` and ``sudo edit <file>``; output is the editor seed."""
    if ctx.verb == "sudo":
        if len(ctx.args) > 1 and ctx.args[0] == "edit":
            return _edit(ctx, ctx.args[1])
        return _say("Usage: sudo [command]")
    if ctx.args:
        return _edit(ctx, ctx.args[0])
    return _say("Usage: edit [filename]")


def _edit(ctx: CommandContext, filename: str) -> CommandResult:
    seed = resolve_edit_content(filename, ctx.level, ctx.file_system, ctx.session)
    if seed.blocked is not None:
        return _say(seed.blocked)
    return _say(seed.content + seed.hint)


def _sum_from_call(code: str) -> int:
    match = _ADD_CALL.search(code)
    if match is None:
        return 8
    return int(match.group(1)) + int(match.group(2))


def _grade_script(level: int, script: ScriptLevel, code: str) -> CommandResult:
    result = validate_level_solution(level, code)
    header = f"Running {script.filename}...\n"
    if not result.is_valid:
        return _say(header + result.feedback)
    if result.meets_requirements:
        body = script.passed_output.format(feedback=result.feedback, total=_sum_from_call(code))
        return CommandResult(header + body, level_completed=True)
    return _say(header + script.failed_output.format(feedback=result.feedback))


def _play_run(run: CannedRun, ctx: CommandContext) -> CommandResult:
    if run.requires is not None and not ctx.session.flag(ctx.level, run.requires):
        return _say(run.blocked)
    return CommandResult(run.output, level_completed=run.completes)


def handle_node(ctx: CommandContext) -> CommandResult:
    if not ctx.args:
        return _say("Usage: node [filename]\nRuns a JavaScript file.\nExample: node script.js")
    filename = ctx.args[0]

    code = ctx.session.files.get(filename)
    if code:
        script = SCRIPT_LEVELS.get(ctx.level)
        if script is not None and script.filename == filename:
            return _grade_script(ctx.level, script, code)
        if ctx.level == 11:
            return _say(
                "For this level, you need to work with the array.js file. "
                "Use 'sudo edit array.js' to edit it and 'node array.js' to run it."
            )

    run = find_run(UNSAVED_NODE_RUNS, ctx.level, filename) or find_run(NODE_RUNS, ctx.level, filename)
    if run is not None:
        return _play_run(run, ctx)
    return _say(
        f"Error: {filename} not found or cannot be executed.\nMake sure the file exists and has the correct content."
    )


def handle_python(ctx: CommandContext) -> CommandResult:
    if not ctx.args:
        return _say("Usage: python [filename]\nRuns a Python script.\nExample: python script.py")
    filename = ctx.args[0]
    run = find_run(PYTHON_RUNS, ctx.level, filename)
    if run is not None:
        return _play_run(run, ctx)
    return _say(f"Running {filename}...\nNo output or file not found.")


def handle_curl(ctx: CommandContext) -> CommandResult:
    return run_rules(CURL_RULES, ctx.verb, ctx.args, ctx.level, ctx.session) or _say(CURL_USAGE)


def handle_ssh(ctx: CommandContext) -> CommandResult:
    return run_rules(SSH_RULES, ctx.verb, ctx.args, ctx.level, ctx.session) or _say(SSH_USAGE)


def handle_strings(ctx: CommandContext) -> CommandResult:
    return run_rules(STRINGS_RULES, ctx.verb, ctx.args, ctx.level, ctx.session) or _say(STRINGS_USAGE)


def handle_docker(ctx: CommandContext) -> CommandResult:
    return _say("Docker command simulated")


def handle_wc(ctx: CommandContext) -> CommandResult:
    return run_rules(WC_RULES, ctx.verb, ctx.args, ctx.level, ctx.session) or _say(WC_USAGE)


HANDLERS: dict[str, Handler] = {
    "save": handle_save,
    "help": handle_help,
    "ls": handle_ls,
    "cat": handle_cat,
    "echo": handle_echo,
    "clear": handle_clear,
    "./script.sh": handle_script,
    "chmod": handle_chmod,
    "find": handle_find,
    "grep": handle_grep,
    "tar": handle_tar,
    "env": handle_env,
    "export": handle_export,
    "edit": handle_edit,
    "sudo": handle_edit,
    "node": handle_node,
    "python": handle_python,
    "curl": handle_curl,
    "ssh": handle_ssh,
    "strings": handle_strings,
    "docker": handle_docker,
    "wc": handle_wc,
}
