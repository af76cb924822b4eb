"""Property-based tests for the ledger, scoring and reasoning engine.

Uses hypothesis to generate inputs and verify invariants that must hold
for every valid call.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from seqthink.tools.frameworks import (
    rank_options,
    score_options,
    score_solution,
)
from seqthink.tools.quantum_engine import BREAKTHROUGH_THRESHOLD, QuantumReasoningEngine
from seqthink.tools.request_types import CriterionInput, OptionInput
from seqthink.tools.thinking_types import FusionResult, QuantumThought, SessionKind, ThoughtRecord
from seqthink.tools.thought_ledger import ThoughtLedger
from seqthink.utils.session_store import SessionStore

# =============================================================================
# Strategy Definitions
# =============================================================================

text_strategy = st.text(
    alphabet=st.characters(whitelist_categories=("L", "N", "P", "S"), whitelist_characters=" "),
    min_size=1,
    max_size=80,
)

level_strategy = st.sampled_from(["low", "medium", "high", "", "extreme"])

unit_float = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)

thought_strategy = st.fixed_dictionaries(
    {
        "text": text_strategy,
        "index": st.integers(min_value=1, max_value=50),
        "total_estimate": st.integers(min_value=1, max_value=50),
        "continuation_needed": st.booleans(),
    },
    optional={
        "branch_origin_index": st.integers(min_value=1, max_value=50),
        "branch_id": st.sampled_from(["a", "b", "c"]),
        "is_revision": st.booleans(),
    },
)

quantum_thought_strategy = st.builds(
    QuantumThought,
    content=text_strategy,
    confidence=unit_float,
    breakthrough_potential=unit_float,
    optimization_score=unit_float,
    connections=st.lists(st.just("c"), max_size=3),
)


# =============================================================================
# Ledger invariants
# =============================================================================


@given(submissions=st.lists(thought_strategy, min_size=1, max_size=15))
@settings(max_examples=50, deadline=None)
def test_ledger_invariants(submissions: list[dict[str, Any]]) -> None:
    """History grows by one per submit; estimates cover the index; branching needs both fields."""
    ledger = ThoughtLedger(render_thoughts=False)

    for n, payload in enumerate(submissions, start=1):
        result = ledger.submit(payload)

        assert result["history_length"] == n
        assert result["total_estimate"] >= payload["index"]
        if payload["index"] > payload["total_estimate"]:
            assert result["total_estimate"] == payload["index"]

    assert [t.text for t in ledger.history] == [p["text"] for p in submissions]

    expected_filed = sum(
        1 for p in submissions if "branch_origin_index" in p and "branch_id" in p
    )
    assert sum(len(v) for v in ledger.branches.values()) == expected_filed


# =============================================================================
# Scoring invariants
# =============================================================================


@given(effort=level_strategy, impact=level_strategy, risk=level_strategy)
def test_score_solution_bounded(effort: str, impact: str, risk: str) -> None:
    score = score_solution(effort, impact, risk)
    assert isinstance(score, int)
    assert 0 <= score <= 10
    assert score == score_solution(effort, impact, risk)


@given(
    values=st.lists(
        st.dictionaries(
            st.sampled_from(["cost", "speed", "safety"]),
            st.floats(min_value=0, max_value=10, allow_nan=False),
        ),
        min_size=1,
        max_size=6,
    ),
    weights=st.lists(st.floats(min_value=0, max_value=1, allow_nan=False), min_size=3, max_size=3),
)
def test_ranking_sorted_and_complete(
    values: list[dict[str, float]], weights: list[float]
) -> None:
    options = [OptionInput(name=f"opt{i}", criteria=v) for i, v in enumerate(values)]
    criteria = [
        CriterionInput(name=name, weight=w)
        for name, w in zip(["cost", "speed", "safety"], weights, strict=True)
    ]

    scores = score_options(options, criteria)
    ranking = rank_options(scores, options)

    assert len(ranking) == len(options)
    ranked_scores = [r["score"] for r in ranking]
    assert ranked_scores == sorted(ranked_scores, reverse=True)


# =============================================================================
# Engine invariants
# =============================================================================


@given(thoughts=st.lists(quantum_thought_strategy, max_size=8))
def test_breakthroughs_above_threshold(thoughts: list[QuantumThought]) -> None:
    engine = QuantumReasoningEngine()
    found = engine.detect_breakthroughs(FusionResult(fused_insights=thoughts))
    assert all(b["potential"] > BREAKTHROUGH_THRESHOLD for b in found)


@given(
    problem=text_strategy,
    strategies=st.lists(
        st.sampled_from(["aggressive", "creative", "analytical", "intuitive", "conservative",
                         "unknown"]),
        max_size=7,
    ),
)
def test_engine_scores_bounded(problem: str, strategies: list[str]) -> None:
    engine = QuantumReasoningEngine()
    threads = engine.run_parallel_reasoning(problem, strategies)
    fused = engine.fuse(threads)

    assert [t.id for t in threads] == list(range(len(threads)))
    assert len(fused.fused_insights) <= 3
    assert 0.0 <= engine.superhuman_score(threads) <= 1.0
    assert 0.0 <= engine.fusion_analysis(threads)["fusion_score"] <= 1.0


@given(thoughts=st.lists(quantum_thought_strategy, max_size=8))
def test_coach_suggestions_sorted(thoughts: list[QuantumThought]) -> None:
    suggestions = QuantumReasoningEngine().ai_coach(thoughts)
    weights = [s.weight for s in suggestions]
    assert weights == sorted(weights, reverse=True)
    assert len(suggestions) <= 3


# =============================================================================
# Persistence round trip
# =============================================================================


@given(
    title=text_strategy,
    metadata=st.dictionaries(
        st.text(alphabet="abcdefghij_", min_size=1, max_size=10),
        st.one_of(st.integers(min_value=-(10**9), max_value=10**9), text_strategy, st.booleans()),
        max_size=5,
    ),
    texts=st.lists(text_strategy, max_size=5),
)
@settings(
    max_examples=30,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
def test_store_round_trip(
    isolated_storage: Path, title: str, metadata: dict[str, Any], texts: list[str]
) -> None:
    store = SessionStore(isolated_storage)
    session = store.create(title, SessionKind.PROBLEM_ANALYSIS, metadata)
    for i, text in enumerate(texts, start=1):
        store.append_thought(
            session.id,
            ThoughtRecord(text=text, index=i, total_estimate=len(texts), continuation_needed=True),
        )

    reloaded = SessionStore(isolated_storage)
    reloaded.load()
    copy = reloaded.get(session.id)

    assert copy.title == title
    assert copy.metadata == metadata
    assert [t.text for t in copy.thoughts] == texts
    assert copy.model_dump() == store.get(session.id).model_dump()
