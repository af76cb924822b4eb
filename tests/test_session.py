"""Unit tests for SessionManager base class."""

from __future__ import annotations

import threading
from dataclasses import dataclass

import pytest

from seqthink.utils.errors import SessionNotFoundError
from seqthink.utils.session import SessionManager


@dataclass
class MockState:
    """Mock state object for testing."""

    session_id: str
    value: int = 0


class MockManager(SessionManager[MockState]):
    """Concrete implementation for testing."""

    def create_session(self, session_id: str) -> MockState:
        state = MockState(session_id=session_id)
        self._register_session(session_id, state)
        return state

    def increment(self, session_id: str) -> None:
        with self.session(session_id) as state:
            state.value += 1


class TestSessionManagerBasics:
    """Tests for basic SessionManager operations."""

    def test_init_empty(self) -> None:
        """New manager should have no sessions."""
        mgr = MockManager()
        assert mgr.session_count() == 0
        assert mgr.session_ids() == []

    def test_register_and_lookup(self) -> None:
        mgr = MockManager()
        mgr.create_session("a")
        mgr.create_session("b")

        assert mgr.session_exists("a")
        assert mgr.session_ids() == ["a", "b"]

    def test_get_session_not_found(self) -> None:
        """_get_session should raise SessionNotFoundError."""
        mgr = MockManager()
        with pytest.raises(SessionNotFoundError) as exc_info:
            mgr._get_session("nonexistent")
        assert exc_info.value.session_id == "nonexistent"
        assert str(exc_info.value) == "Session not found: nonexistent"

    def test_session_context_raises_for_unknown(self) -> None:
        mgr = MockManager()
        with pytest.raises(SessionNotFoundError), mgr.session("missing"):
            pass

    def test_register_replaces(self) -> None:
        mgr = MockManager()
        mgr.create_session("a")
        mgr._register_session("a", MockState(session_id="a", value=9))

        with mgr.session("a") as state:
            assert state.value == 9
        assert mgr.session_count() == 1

    def test_locked_yields_all_sessions(self) -> None:
        mgr = MockManager()
        mgr.create_session("a")
        with mgr.locked() as sessions:
            assert list(sessions) == ["a"]


class TestSessionManagerConcurrency:
    """Lock behaviour under concurrent writers."""

    def test_concurrent_increments(self) -> None:
        mgr = MockManager()
        mgr.create_session("shared")

        def worker() -> None:
            for _ in range(200):
                mgr.increment("shared")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        with mgr.session("shared") as state:
            assert state.value == 1600
