"""Durable session storage.

One JSON file per analysis session, named ``<session_id>.json``, inside a
dedicated sessions directory. The in-memory map is authoritative within a
process lifetime; disk is the durability backstop and is rewritten in full
on every mutation.

Write failures are logged and NOT rolled back in memory, so memory and
disk may diverge until the next successful write of the same session.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import orjson
from loguru import logger

from seqthink.tools.thinking_types import (
    AnalysisSession,
    ExportFormat,
    SessionKind,
    ThoughtRecord,
)
from seqthink.utils.errors import PersistenceError, ValidationError
from seqthink.utils.session import SessionManager


# Allowed base directories for session storage (security: prevent path traversal)
# Users can override via SEQTHINK_ALLOWED_DIRS env var (colon-separated)
_DEFAULT_ALLOWED_DIRS = [
    Path.home() / ".seqthink",
    Path.home() / ".local" / "share" / "seqthink",
    Path("/tmp"),  # nosec B108 - intentionally allowed for dev/testing
    Path.cwd(),
]


def _get_allowed_dirs() -> list[Path]:
    """Get list of allowed directories for session storage."""
    env_dirs = os.getenv("SEQTHINK_ALLOWED_DIRS")
    if env_dirs:
        return [Path(d).resolve() for d in env_dirs.split(":") if d]
    return [d.resolve() for d in _DEFAULT_ALLOWED_DIRS]


def validate_storage_path(path: Path | str) -> Path:
    """Validate and sanitize a storage directory to prevent path traversal.

    Returns:
        Validated, resolved Path object.

    Raises:
        ValueError: If path is outside allowed directories or contains traversal.

    """
    path_str = str(path)
    if ".." in Path(path_str).parts:
        raise ValueError(f"Invalid storage path: traversal detected in '{path}'")

    resolved = Path(path_str).expanduser().resolve()
    allowed_dirs = _get_allowed_dirs()
    is_allowed = any(
        resolved == allowed_dir or allowed_dir in resolved.parents for allowed_dir in allowed_dirs
    )

    if not is_allowed:
        allowed_list = ", ".join(str(d) for d in allowed_dirs)
        raise ValueError(
            f"Storage path '{resolved}' is outside allowed directories. "
            f"Allowed: {allowed_list}. "
            f"Set SEQTHINK_ALLOWED_DIRS to add custom directories."
        )

    return resolved


def _dump(data: Any) -> bytes:
    result: bytes = orjson.dumps(data, option=orjson.OPT_INDENT_2)
    return result


class SessionStore(SessionManager[AnalysisSession]):
    """File-backed session store with an in-memory cache.

    Usage:
        store = SessionStore(Path("~/.seqthink/sessions").expanduser())
        store.load()
        session = store.create("Problem Analysis: ...", SessionKind.PROBLEM_ANALYSIS)
        store.append_thought(session.id, record)
        print(store.export(session.id, "markdown"))

    All mutations run under the manager lock, so writes for the same
    session id are serialized.
    """

    def __init__(self, sessions_dir: Path | str) -> None:
        """Initialize the store.

        Args:
            sessions_dir: Directory holding one JSON file per session.
                Created on ``load()`` if absent.

        """
        super().__init__()
        self.sessions_dir = Path(sessions_dir)

    def _path_for(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.json"

    # -------------------------------------------------------------------------
    # Loading and persistence
    # -------------------------------------------------------------------------

    def load(self) -> int:
        """Populate the in-memory map from disk.

        Files that fail to read or validate are skipped with a warning.

        Returns:
            Number of sessions loaded.

        """
        self.sessions_dir.mkdir(parents=True, exist_ok=True)
        loaded = 0
        for path in sorted(self.sessions_dir.glob("*.json")):
            try:
                session = AnalysisSession.model_validate(orjson.loads(path.read_bytes()))
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable session file {path.name}: {e}")
                continue
            self._register_session(session.id, session)
            loaded += 1

        logger.info(f"Loaded {loaded} session(s) from {self.sessions_dir}")
        return loaded

    def _write(self, session: AnalysisSession) -> None:
        path = self._path_for(session.id)
        try:
            self.sessions_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(_dump(session.model_dump(mode="json")))
        except OSError as e:
            raise PersistenceError(str(path), str(e)) from e

    def persist(self, session: AnalysisSession) -> bool:
        """Store a session in memory and write it to disk.

        Returns:
            True if the disk write succeeded. On failure the in-memory copy
            is kept and the error is logged.

        """
        with self._lock:
            self._register_session(session.id, session)
            try:
                self._write(session)
            except PersistenceError as e:
                logger.error(f"Failed to persist session {session.id}: {e}")
                return False
        return True

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def create(
        self,
        title: str,
        kind: SessionKind,
        metadata: dict[str, Any] | None = None,
    ) -> AnalysisSession:
        """Create, register and persist a new active session."""
        session = AnalysisSession(title=title, kind=kind, metadata=metadata or {})
        self.persist(session)
        logger.debug(f"Created {kind.value} session {session.id}")
        return session

    def get(self, session_id: str) -> AnalysisSession:
        """Get a session by ID.

        Raises:
            SessionNotFoundError: If the session is unknown.

        """
        with self.session(session_id) as session:
            return session

    def append_thought(self, session_id: str, record: ThoughtRecord) -> AnalysisSession:
        """Attach a thought record to a session and persist it.

        Raises:
            SessionNotFoundError: If the session is unknown.

        """
        with self.session(session_id) as session:
            session.thoughts.append(record)
            session.touch()
            self.persist(session)
            return session

    def update(
        self,
        session_id: str,
        title: str | None = None,
        notes: str | None = None,
    ) -> bool:
        """Rename and/or annotate a session, then persist it.

        Notes are merged into ``metadata["notes"]``.

        Returns:
            True if the disk write succeeded.

        Raises:
            SessionNotFoundError: If the session is unknown.

        """
        with self.session(session_id) as session:
            session.touch()
            if title:
                session.title = title
            if notes:
                session.metadata = {**session.metadata, "notes": notes}
            return self.persist(session)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export(self, session_id: str, export_format: ExportFormat | str) -> str:
        """Render a session as JSON, Markdown or a short summary.

        Output depends only on the session's stored fields, so repeated
        exports of an unchanged session are identical.

        Raises:
            SessionNotFoundError: If the session is unknown.
            ValidationError: If the format is not supported.

        """
        try:
            fmt = ExportFormat(export_format)
        except ValueError as e:
            choices = ", ".join(f.value for f in ExportFormat)
            raise ValidationError("format", f"must be one of {choices}") from e

        with self.session(session_id) as session:
            if fmt == ExportFormat.MARKDOWN:
                return render_markdown(session)
            if fmt == ExportFormat.SUMMARY:
                return render_summary(session)
            return _dump(session.model_dump(mode="json")).decode("utf-8")

    def describe(self, session_id: str) -> dict[str, Any]:
        """Short status view of one session."""
        with self.session(session_id) as session:
            return {
                "session_id": session.id,
                "title": session.title,
                "kind": session.kind.value,
                "status": session.status.value,
                "thought_count": len(session.thoughts),
                "created_at": session.created_at.isoformat(),
                "updated_at": session.updated_at.isoformat(),
            }


def render_markdown(session: AnalysisSession) -> str:
    """Markdown report: header, metadata block, one section per thought."""
    metadata = _dump(session.metadata).decode("utf-8")
    thoughts = "\n\n".join(f"### Thought {t.index}\n{t.text}" for t in session.thoughts)
    return (
        f"# {session.title}\n\n"
        f"**Created:** {session.created_at.isoformat()}\n"
        f"**Type:** {session.kind.value}\n"
        f"**Status:** {session.status.value}\n\n"
        f"## Analysis\n\n{metadata}\n\n"
        f"## Thoughts\n\n{thoughts}"
    )


def render_summary(session: AnalysisSession) -> str:
    return (
        f"Summary: {session.title}\n"
        f"Completed: {session.updated_at.isoformat()}\n"
        f"Key insights: {len(session.thoughts)} thoughts captured\n"
        f"Recommendations: See detailed analysis"
    )


def build_session_store(sessions_dir: Path | str, *, load: bool = True) -> SessionStore:
    """Create a store for ``sessions_dir`` and optionally load it."""
    store = SessionStore(sessions_dir)
    if load:
        store.load()
    return store
