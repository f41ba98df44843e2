"""Static grading of user-submitted JavaScript for the scripting levels.

Nothing here runs the submitted code. A script is first parsed with esprima,
wrapped the same way a ``Function`` body would be, to confirm it is
syntactically valid; each level then checks for the literal constructs the
puzzle asks for. Graders match surface text, so ``return b+a`` does not pass
level 10 even though it adds.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

import esprima
from esprima.error_handler import Error as EsprimaError

from .models import ValidationResult

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_REVERSE_CALL = re.compile(r"numbers\s*\.\s*reverse\s*\(\s*\)")
_REGEX_METHODS = ("match", "exec", "test", "search", "replace")
UNBALANCED_CODE = "Unexpected closing brace: the code is not a single balanced function body"


def _strip_whitespace(code: str) -> str:
    return _WHITESPACE.sub("", code)


def _passed(feedback: str) -> ValidationResult:
    return ValidationResult(is_valid=True, meets_requirements=True, feedback=feedback)


def _failed(feedback: str) -> ValidationResult:
    return ValidationResult(is_valid=True, meets_requirements=False, feedback=feedback)


def _is_single_wrapper(program) -> bool:
    """True when the parsed program is nothing but the wrapping function expression."""
    if len(program.body) != 1:
        return False
    statement = program.body[0]
    return statement.type == "ExpressionStatement" and statement.expression.type == "FunctionExpression"


def check_syntax(code: str) -> str | None:
    """Return the parser error message for invalid code, None when it parses."""
    wrapped = f"(function () {{\n{code}\n}});"
    try:
        program = esprima.parseScript(wrapped)
    except EsprimaError as exc:
        return str(exc)
    if not _is_single_wrapper(program):
        logger.debug("Submitted code escapes its function wrapper")
        return UNBALANCED_CODE
    return None


def _validate_level10(code: str) -> ValidationResult:
    if "returna+b" in _strip_whitespace(code):
        return _passed(
            "Excellent! You've successfully fixed the add function. It now correctly returns a + b instead of a - b."
        )
    return _failed(
        "The function still doesn't work correctly. It should add the numbers, not subtract them. "
        "Use 'edit script.js' to edit it again."
    )


def _validate_level11(code: str) -> ValidationResult:
    if "numbers.reverse()" in code or _REVERSE_CALL.search(code):
        return _passed("Great job! You've successfully used the array.reverse() method to reverse the array.")
    return _failed("The array hasn't been reversed correctly. Make sure to use 'numbers.reverse()' to reverse the array.")


def _validate_level12(code: str) -> ValidationResult:
    if "JSON.parse" not in code:
        return _failed("Your script doesn't use JSON.parse() to parse the JSON data. Try again.")
    if "data.json" not in code:
        return _failed("Your script doesn't read the data.json file. Use fs.readFileSync('data.json') to read the file.")
    if "admin" not in code and "users" not in code:
        return _failed("Your script doesn't look for the admin user in the users array.")
    if "password" not in code and "password" not in _strip_whitespace(code):
        return _failed("Your script doesn't extract the password from the admin user.")
    return _passed("Great job! You've successfully parsed the JSON data and extracted the admin password.")


def _validate_level13(code: str) -> ValidationResult:
    if not any(method in code for method in _REGEX_METHODS):
        return _failed(
            "Your script doesn't appear to use regular expressions. Make sure to use regex patterns with "
            "methods like match() or exec() to extract the patterns."
        )

    has_email = "@" in code or r"\w+@\w+" in code
    has_phone = r"\d{3}" in code or "555-" in code
    logger.debug("Level 13 patterns: email=%s phone=%s", has_email, has_phone)
    if not has_email and not has_phone:
        return _failed("Your script doesn't have patterns to match both email and phone number formats.")
    if not has_email:
        return _failed("Your script doesn't have a pattern to match email addresses.")
    if not has_phone:
        return _failed("Your script doesn't have a pattern to match phone numbers.")
    return _passed("Excellent! You've successfully extracted both the email and phone number using regular expressions.")


LEVEL_VALIDATORS: dict[int, Callable[[str], ValidationResult]] = {
    10: _validate_level10,
    11: _validate_level11,
    12: _validate_level12,
    13: _validate_level13,
}


def has_validator(level: int) -> bool:
    """Return whether a level grades scripts with a dedicated check."""
    return level in LEVEL_VALIDATORS


def validate_level_solution(level: int, code: str | None) -> ValidationResult:
    """Check syntax, then the level-specific requirement, of a submitted script."""
    if not code:
        logger.warning("Empty code submitted for level %d", level)
        return ValidationResult(is_valid=False, meets_requirements=False, feedback="No code provided for validation")

    logger.debug("Validating %d chars for level %d", len(code), level)
    error = check_syntax(code)
    if error is not None:
        logger.debug("Syntax error for level %d: %s", level, error)
        return ValidationResult(
            is_valid=False,
            meets_requirements=False,
            feedback=f"Your code has a syntax error: {error}",
        )

    validator = LEVEL_VALIDATORS.get(level)
    if validator is None:
        return _passed("Code looks good!")
    return validator(code)
