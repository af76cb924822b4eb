"""Sequential thought ledger.

Records every submitted reasoning step in submission order, files
branched steps under their branch identifier and, when the caller names
a session, attaches the step to that persisted session.

The ledger is process-wide and in-memory only: it is created empty at
start-up, never pruned and never written to disk. Session attachment is
the only durable side effect.

Example:
    >>> ledger = ThoughtLedger(store)
    >>> ledger.submit({"text": "Define the problem", "index": 1,
    ...                "total_estimate": 3, "continuation_needed": True})
    {'index': 1, 'total_estimate': 3, 'continuation_needed': True,
     'branch_ids': [], 'history_length': 1}

"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from loguru import logger

from seqthink.tools.thinking_types import ThoughtRecord
from seqthink.utils.errors import ValidationError

if TYPE_CHECKING:
    from seqthink.utils.session_store import SessionStore


def format_thought(record: ThoughtRecord) -> str:
    """Render a record as a box-drawn block for the diagnostic log."""
    if record.is_revision:
        header = f"Revision {record.index}/{record.total_estimate}"
        header += f" (revising thought {record.revises_index})"
    elif record.branch_origin_index:
        header = f"Branch {record.index}/{record.total_estimate}"
        header += f" (from thought {record.branch_origin_index}, ID: {record.branch_id})"
    else:
        header = f"Thought {record.index}/{record.total_estimate}"

    border = "─" * (max(len(header), len(record.text)) + 4)
    return (
        f"\n┌{border}┐\n"
        f"│ {header.ljust(len(border) - 2)} │\n"
        f"├{border}┤\n"
        f"│ {record.text.ljust(len(border) - 2)} │\n"
        f"└{border}┘"
    )


class ThoughtLedger:
    """Append-only history of thoughts plus a branch index.

    All mutation happens under a single writer lock, so concurrent
    submissions are recorded in a consistent order and a failed
    submission leaves no trace.
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        render_thoughts: bool = True,
        max_session_thoughts: int | None = None,
    ) -> None:
        """Initialize an empty ledger.

        Args:
            store: Session store used when a submission names a session.
            render_thoughts: Log a box-drawn rendering of each thought.
            max_session_thoughts: Cap on thoughts attached to one session.

        """
        self._store = store
        self._render = render_thoughts
        self._max_session_thoughts = max_session_thoughts
        self._history: list[ThoughtRecord] = []
        self._branches: dict[str, list[ThoughtRecord]] = {}
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def submit(self, data: Mapping[str, Any], session_id: str | None = None) -> dict[str, Any]:
        """Validate and record one thought.

        Args:
            data: Raw thought fields (text, index, total_estimate,
                continuation_needed, plus optional revision/branch fields).
            session_id: Session to attach the thought to, if any.

        Returns:
            Ledger summary: index, total_estimate, continuation_needed,
            branch_ids and history_length (plus session_id when attached).

        Raises:
            ValidationError: If a field is missing or mistyped.
            SessionNotFoundError: If ``session_id`` is unknown.

        """
        record = ThoughtRecord.from_input(data)

        with self._lock:
            if session_id is not None:
                self._check_session(session_id)

            if record.index > record.total_estimate:
                record.total_estimate = record.index

            self._history.append(record)
            if record.files_into_branch and record.branch_id is not None:
                self._branches.setdefault(record.branch_id, []).append(record)

            if session_id is not None and self._store is not None:
                self._store.append_thought(session_id, record)

            result: dict[str, Any] = {
                "index": record.index,
                "total_estimate": record.total_estimate,
                "continuation_needed": record.continuation_needed,
                "branch_ids": list(self._branches),
                "history_length": len(self._history),
            }

        if session_id is not None:
            result["session_id"] = session_id

        if self._render:
            logger.info(format_thought(record))
        else:
            logger.debug(f"Recorded thought {record.index}/{record.total_estimate}")

        return result

    def _check_session(self, session_id: str) -> None:
        if self._store is None:
            raise ValidationError("session_id", "no session store is configured")
        session = self._store.get(session_id)
        limit = self._max_session_thoughts
        if limit is not None and len(session.thoughts) >= limit:
            raise ValidationError("session_id", f"session already holds {limit} thoughts")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def history(self) -> tuple[ThoughtRecord, ...]:
        """All recorded thoughts in submission order."""
        with self._lock:
            return tuple(self._history)

    @property
    def branches(self) -> Mapping[str, tuple[ThoughtRecord, ...]]:
        """Read-only view of the branch index."""
        with self._lock:
            return MappingProxyType({k: tuple(v) for k, v in self._branches.items()})

    def get_branch(self, branch_id: str) -> tuple[ThoughtRecord, ...]:
        with self._lock:
            return tuple(self._branches.get(branch_id, ()))

    def revisions_of(self, index: int) -> list[ThoughtRecord]:
        """Thoughts that declare themselves revisions of ``index``."""
        with self._lock:
            return [t for t in self._history if t.is_revision and t.revises_index == index]

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "history_length": len(self._history),
                "branch_ids": list(self._branches),
                "revision_count": sum(1 for t in self._history if t.is_revision),
            }
