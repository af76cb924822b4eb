"""Thinking types and data structures.

This module contains the enums and models shared by the thought ledger,
the session store and the reasoning-thread engine. Records that are
persisted or arrive over the wire are Pydantic models; engine-internal
results are plain dataclasses.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from seqthink.utils.errors import ValidationError

SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]+$"

PositiveIndex = Annotated[StrictInt, Field(ge=1)]
BranchId = Annotated[StrictStr, Field(min_length=1)]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def new_session_id() -> str:
    """Generate an opaque session token."""
    return uuid.uuid4().hex[:12]


# =============================================================================
# Enums
# =============================================================================


class SessionStatus(str, Enum):
    """Status of an analysis session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class SessionKind(str, Enum):
    """Which operation created a session."""

    PROBLEM_ANALYSIS = "problem-analysis"
    SOLUTION_PLANNING = "solution-planning"


class ExportFormat(str, Enum):
    """Supported session export formats."""

    JSON = "json"
    MARKDOWN = "markdown"
    SUMMARY = "summary"


class Strategy(str, Enum):
    """Reasoning strategies for synthetic parallel threads."""

    AGGRESSIVE = "aggressive"
    CREATIVE = "creative"
    ANALYTICAL = "analytical"
    INTUITIVE = "intuitive"
    CONSERVATIVE = "conservative"


class SuggestionType(str, Enum):
    """Kinds of coaching suggestion."""

    OPTIMIZATION = "optimization"
    BREAKTHROUGH = "breakthrough"
    PIVOT = "pivot"
    MERGE = "merge"
    EXPLORE = "explore"


# =============================================================================
# Thought ledger and sessions
# =============================================================================


class ThoughtRecord(BaseModel):
    """One step in a sequential reasoning chain."""

    model_config = ConfigDict(extra="ignore")

    text: StrictStr = Field(min_length=1)
    index: PositiveIndex
    total_estimate: PositiveIndex
    continuation_needed: StrictBool
    is_revision: StrictBool | None = None
    revises_index: PositiveIndex | None = None
    branch_origin_index: PositiveIndex | None = None
    branch_id: BranchId | None = None
    more_thoughts_needed: StrictBool | None = None
    confidence: float | None = None
    tags: list[StrictStr] | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_input(cls, data: Mapping[str, Any]) -> ThoughtRecord:
        """Validate caller-supplied fields into a record.

        The server always assigns ``created_at``; any value in ``data`` is
        ignored.

        Raises:
            ValidationError: Naming the first missing or mistyped field.

        """
        payload = {k: v for k, v in data.items() if k != "created_at"}
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

    @property
    def files_into_branch(self) -> bool:
        """Whether this record belongs in the branch index."""
        return self.branch_origin_index is not None and self.branch_id is not None


class AnalysisSession(BaseModel):
    """A persisted unit of analysis or planning work."""

    id: str = Field(default_factory=new_session_id, pattern=SESSION_ID_PATTERN)
    title: str
    kind: SessionKind
    thoughts: list[ThoughtRecord] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    status: SessionStatus = SessionStatus.ACTIVE
    metadata: dict[str, Any] = Field(default_factory=dict)

    def touch(self) -> None:
        """Bump the last-modified timestamp."""
        self.updated_at = utc_now()


# =============================================================================
# Reasoning threads
# =============================================================================


class QuantumThought(BaseModel):
    """A synthetic thought produced by one strategy thread."""

    id: str = ""
    content: str = ""
    confidence: float = 0.0
    thread_id: int = Field(default=0, validation_alias=AliasChoices("thread_id", "thread"))
    connections: list[str] = Field(default_factory=list)
    breakthrough_potential: float = 0.0
    optimization_score: float = 0.0

    @property
    def fusion_weight(self) -> float:
        """Ranking key used when fusing threads."""
        return self.confidence * self.breakthrough_potential


class ReasoningThread(BaseModel):
    """One strategy's line of reasoning."""

    id: int = 0
    strategy: str = ""
    thoughts: list[QuantumThought] = Field(default_factory=list)
    performance: float = 0.0


@dataclass(frozen=True)
class CoachSuggestion:
    """Advisory suggestion from the reasoning coach."""

    type: SuggestionType
    message: str
    confidence: float
    impact: float

    @property
    def weight(self) -> float:
        return self.confidence * self.impact

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "message": self.message,
            "confidence": self.confidence,
            "impact": self.impact,
        }


@dataclass
class FusionResult:
    """Top insights merged across reasoning threads."""

    fused_insights: list[QuantumThought] = field(default_factory=list)
    fusion_confidence: float = 0.0
    breakthrough_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "fused_insights": [t.model_dump() for t in self.fused_insights],
            "fusion_confidence": self.fusion_confidence,
            "breakthrough_score": self.breakthrough_score,
        }
