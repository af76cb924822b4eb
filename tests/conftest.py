"""pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from seqthink.config import reload_config
from seqthink.tools.thought_ledger import ThoughtLedger
from seqthink.utils.session_store import SessionStore


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point session storage at a per-test temporary directory."""
    import seqthink.server as server_module

    sessions_dir = tmp_path / "sessions"
    monkeypatch.setenv("SESSIONS_DIR", str(sessions_dir))
    monkeypatch.setenv("SEQTHINK_ALLOWED_DIRS", str(tmp_path))
    monkeypatch.setenv("LOG_THOUGHTS", "false")
    reload_config()
    server_module.reset_state()

    yield sessions_dir

    server_module.reset_state()
    monkeypatch.undo()
    reload_config()


@pytest.fixture
def store(isolated_storage: Path) -> SessionStore:
    """Empty session store in the temporary sessions directory."""
    s = SessionStore(isolated_storage)
    s.load()
    return s


@pytest.fixture
def ledger(store: SessionStore) -> ThoughtLedger:
    """Ledger backed by the temporary store."""
    return ThoughtLedger(store=store, render_thoughts=False)


@pytest.fixture
def thought() -> dict[str, Any]:
    """Minimal valid thought payload."""
    return {
        "text": "Define the problem precisely",
        "index": 1,
        "total_estimate": 3,
        "continuation_needed": True,
    }


@pytest.fixture
def sample_solutions() -> list[dict[str, Any]]:
    """Two candidate solutions with different risk profiles."""
    return [
        {
            "title": "Rewrite the importer",
            "description": "Replace the legacy importer with a streaming one",
            "effort": "high",
            "impact": "high",
            "risk": "medium",
        },
        {
            "title": "Add an index",
            "description": "Index the lookup column",
            "effort": "medium",
            "impact": "high",
            "risk": "low",
            "pros": ["Cheap"],
            "cons": ["Partial fix"],
        },
    ]


@pytest.fixture
def sample_options() -> list[dict[str, Any]]:
    """Two options scored on four criteria."""
    return [
        {
            "name": "A",
            "description": "Managed cloud database",
            "criteria": {"cost": 8, "scalability": 9, "security": 7, "performance": 8},
        },
        {
            "name": "B",
            "description": "Self-hosted cluster",
            "criteria": {"cost": 6, "scalability": 5, "security": 9, "performance": 7},
        },
    ]


@pytest.fixture
def sample_criteria() -> list[dict[str, Any]]:
    """Weights for the four sample criteria."""
    return [
        {"name": "cost", "weight": 0.3},
        {"name": "scalability", "weight": 0.3},
        {"name": "security", "weight": 0.25},
        {"name": "performance", "weight": 0.15},
    ]
