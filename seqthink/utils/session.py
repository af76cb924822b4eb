"""Session manager base class.

Provides the lock-guarded in-memory session map shared by the session
store and anything else that needs atomic access to session state.
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import Generic, TypeVar

from seqthink.utils.errors import SessionNotFoundError

T = TypeVar("T")


class SessionManager(Generic[T]):
    """Thread-safe base class for session management.

    Provides:
    - Thread-safe session storage with RLock
    - Common `_get_session()` lookup with error handling
    - `@contextmanager` helper for atomic session operations

    Usage:
        class MyManager(SessionManager[MyState]):
            def do_something(self, session_id: str) -> dict:
                with self.session(session_id) as state:
                    state.value = "updated"
                    return {"status": "ok"}
    """

    def __init__(self) -> None:
        """Initialize session manager with empty sessions and lock."""
        self._sessions: dict[str, T] = {}
        self._lock = threading.RLock()

    def _get_session(self, session_id: str) -> T:
        """Get session by ID.

        Raises:
            SessionNotFoundError: If session doesn't exist.

        Note:
            This method does NOT acquire the lock. Caller must hold lock
            or use the `session()` context manager.

        """
        if session_id not in self._sessions:
            raise SessionNotFoundError(session_id)
        return self._sessions[session_id]

    @contextmanager
    def session(self, session_id: str) -> Generator[T, None, None]:
        """Context manager for atomic session operations.

        Acquires lock, retrieves session, yields it, and releases lock
        even if an exception occurs.

        Raises:
            SessionNotFoundError: If session doesn't exist.

        Example:
            with self.session(session_id) as state:
                state.status = SessionStatus.COMPLETED

        """
        with self._lock:
            yield self._get_session(session_id)

    @contextmanager
    def locked(self) -> Generator[dict[str, T], None, None]:
        """Context manager for operations on all sessions.

        Acquires lock and yields the sessions dict for bulk operations.
        """
        with self._lock:
            yield self._sessions

    def session_exists(self, session_id: str) -> bool:
        """Check if session exists (thread-safe)."""
        with self._lock:
            return session_id in self._sessions

    def session_count(self) -> int:
        """Get number of known sessions (thread-safe)."""
        with self._lock:
            return len(self._sessions)

    def session_ids(self) -> list[str]:
        """Get known session IDs in registration order (thread-safe)."""
        with self._lock:
            return list(self._sessions)

    def _register_session(self, session_id: str, state: T) -> None:
        """Register or replace a session (thread-safe)."""
        with self._lock:
            self._sessions[session_id] = state
