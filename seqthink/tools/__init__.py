"""SeqThink tools - thought ledger, analysis frameworks and reasoning-thread engine."""

from .frameworks import (
    FRAMEWORKS,
    Framework,
    apply_framework,
    get_framework,
    score_solution,
)
from .quantum_engine import QuantumReasoningEngine
from .thinking_types import (
    AnalysisSession,
    CoachSuggestion,
    ExportFormat,
    FusionResult,
    QuantumThought,
    ReasoningThread,
    SessionKind,
    SessionStatus,
    Strategy,
    SuggestionType,
    ThoughtRecord,
)
from .thought_ledger import ThoughtLedger, format_thought

__all__ = [
    # Ledger
    "ThoughtLedger",
    "format_thought",
    # Frameworks
    "FRAMEWORKS",
    "Framework",
    "apply_framework",
    "get_framework",
    "score_solution",
    # Engine
    "QuantumReasoningEngine",
    # Types
    "AnalysisSession",
    "CoachSuggestion",
    "ExportFormat",
    "FusionResult",
    "QuantumThought",
    "ReasoningThread",
    "SessionKind",
    "SessionStatus",
    "Strategy",
    "SuggestionType",
    "ThoughtRecord",
]
