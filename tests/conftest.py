from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from terminalzero.content_loader import LevelCatalog, load_levels  # noqa: E402
from terminalzero.dispatcher import CommandProcessor  # noqa: E402
from terminalzero.session import SessionState  # noqa: E402


@pytest.fixture(scope="session")
def catalog() -> LevelCatalog:
    """Bundled catalog, loaded once; it is read-only."""
    return load_levels()


@pytest.fixture
def session() -> SessionState:
    return SessionState()


@pytest.fixture
def processor(session: SessionState, catalog: LevelCatalog) -> CommandProcessor:
    """Processor with a fresh session per test."""
    return CommandProcessor(session=session, catalog=catalog)
