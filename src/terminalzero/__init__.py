"""terminalzero package."""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = [
    "CommandProcessor",
    "CommandResult",
    "GameService",
    "SessionState",
    "ValidationResult",
    "__version__",
    "load_levels",
    "validate_level_solution",
]


def _version_from_pyproject() -> str | None:
    """Best-effort version lookup from local pyproject.toml for source runs."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if not pyproject.exists():
            continue
        text = pyproject.read_text(encoding="utf-8")
        in_project = False
        for line in text.splitlines():
            stripped = line.strip()
            if stripped.startswith("[") and stripped.endswith("]"):
                in_project = stripped == "[project]"
                continue
            if not in_project:
                continue
            match = re.match(r'^version\s*=\s*"([^"]+)"\s*$', stripped)
            if match:
                return match.group(1)
    return None


_project_version = _version_from_pyproject()
if _project_version is not None:
    __version__ = _project_version
else:
    try:
        __version__ = version("terminalzero")
    except PackageNotFoundError:
        __version__ = "0+unknown"

from .content_loader import load_levels  # noqa: E402
from .dispatcher import CommandProcessor  # noqa: E402
from .models import CommandResult, ValidationResult  # noqa: E402
from .service import GameService  # noqa: E402
from .session import SessionState  # noqa: E402
from .validator import validate_level_solution  # noqa: E402
