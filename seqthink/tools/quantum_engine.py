"""Reasoning-thread engine.

Synthesizes one templated thought per reasoning strategy, scores the
resulting threads, fuses the strongest insights and produces coaching,
prediction and optimization reports.

Everything here is deterministic arithmetic over fixed per-strategy
constants: nothing inspects problem text beyond interpolating it into a
template, and the "threads" are computed one after another.

Scores:
    performance      mean(confidence * optimization_score) over a thread
    fusion weight    confidence * breakthrough_potential
    superhuman       min(1, mean performance + 0.1 * threads + 0.2 bonus)
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from seqthink.tools.thinking_types import (
    CoachSuggestion,
    FusionResult,
    QuantumThought,
    ReasoningThread,
    Strategy,
    SuggestionType,
)

DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    Strategy.AGGRESSIVE,
    Strategy.CREATIVE,
    Strategy.ANALYTICAL,
    Strategy.INTUITIVE,
    Strategy.CONSERVATIVE,
)

BREAKTHROUGH_THRESHOLD = 0.85
SUPERHUMAN_BREAKTHROUGH_LEVEL = 0.9
FUSION_TOP_K = 3

EMERGENT_PROPERTIES = ("Cross-thread synergy detected", "Pattern emergence identified")


# =============================================================================
# Strategy templates
# =============================================================================


@dataclass(frozen=True)
class StrategyTemplate:
    """Fixed text and scores for one strategy's synthetic thought."""

    id_prefix: str
    label: str
    approach: str
    confidence: float
    breakthrough_potential: float
    optimization_score: float

    def render(self, problem: str, thread_id: int) -> QuantumThought:
        return QuantumThought(
            id=f"{self.id_prefix}_{uuid.uuid4().hex[:8]}",
            content=f"{self.label} APPROACH: {problem} - {self.approach}",
            confidence=self.confidence,
            thread_id=thread_id,
            breakthrough_potential=self.breakthrough_potential,
            optimization_score=self.optimization_score,
        )


STRATEGY_TEMPLATES: dict[Strategy, StrategyTemplate] = {
    Strategy.AGGRESSIVE: StrategyTemplate(
        "agg", "AGGRESSIVE", "Push boundaries, take calculated risks, move fast", 0.8, 0.9, 0.85
    ),
    Strategy.CREATIVE: StrategyTemplate(
        "cre",
        "CREATIVE",
        "Think outside the box, unconventional solutions, innovation focus",
        0.75,
        0.95,
        0.8,
    ),
    Strategy.ANALYTICAL: StrategyTemplate(
        "ana",
        "ANALYTICAL",
        "Data-driven, systematic analysis, logical progression",
        0.9,
        0.7,
        0.9,
    ),
    Strategy.INTUITIVE: StrategyTemplate(
        "int",
        "INTUITIVE",
        "Pattern recognition, gut instincts, holistic understanding",
        0.7,
        0.85,
        0.75,
    ),
    Strategy.CONSERVATIVE: StrategyTemplate(
        "con",
        "CONSERVATIVE",
        "Risk mitigation, proven methods, stable solutions",
        0.85,
        0.6,
        0.8,
    ),
}


def _template_handler(strategy: Strategy) -> Callable[[str, int], list[QuantumThought]]:
    template = STRATEGY_TEMPLATES[strategy]

    def handler(problem: str, thread_id: int) -> list[QuantumThought]:
        return [template.render(problem, thread_id)]

    return handler


STRATEGY_HANDLERS: dict[Strategy, Callable[[str, int], list[QuantumThought]]] = {
    strategy: _template_handler(strategy) for strategy in Strategy
}


def thoughts_for_strategy(problem: str, strategy: str, thread_id: int) -> list[QuantumThought]:
    """Generate a strategy's thoughts; unknown strategy names yield none."""
    try:
        handler = STRATEGY_HANDLERS[Strategy(strategy)]
    except ValueError:
        logger.debug(f"Unknown strategy '{strategy}', thread {thread_id} left empty")
        return []
    return handler(problem, thread_id)


# =============================================================================
# Stub policies
# =============================================================================
# Fixed-output analyzers. They deliberately ignore their input.


def stub_complexity(solution: Any) -> float:
    return 0.7


def stub_feasibility(solution: Any) -> float:
    return 0.8


def stub_impact(solution: Any) -> float:
    return 0.9


def stub_risk(solution: Any) -> float:
    return 0.3


def stub_innovation(solution: Any) -> float:
    return 0.85


def stub_session_performance(session: Any) -> dict[str, Any]:
    return {
        "efficiency": 0.8,
        "potential": 0.9,
        "bottlenecks": ["Thread synchronization", "Insight fusion"],
    }


FAILURE_MODES = ("Implementation complexity", "Resource constraints")
OPTIMIZATION_OPPORTUNITIES = ("Simplify approach", "Increase resources")

STRATEGY_ADJUSTMENTS = ("Increase creative thread weight", "Reduce conservative bias")
FOCUS_AREAS = ("Breakthrough detection", "Cross-thread synthesis")
EFFICIENCY_BOOSTS = ("Parallel processing optimization", "Real-time fusion")
BREAKTHROUGH_PATHS = ("Creative-analytical fusion", "Intuitive-aggressive hybrid")
EXPECTED_IMPROVEMENT = 0.25


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


# =============================================================================
# Coaching thresholds
# =============================================================================

REPETITION_SCORE = 0.3
PIVOT_THRESHOLD = 0.7
BREAKTHROUGH_COACH_THRESHOLD = 0.8
MERGE_DENSITY_THRESHOLD = 0.3

PIVOT_SUGGESTION = CoachSuggestion(
    SuggestionType.PIVOT,
    "Detected repetitive thinking. Try exploring from a completely different angle.",
    0.9,
    0.8,
)
BREAKTHROUGH_SUGGESTION = CoachSuggestion(
    SuggestionType.BREAKTHROUGH,
    "HIGH BREAKTHROUGH POTENTIAL detected! Push deeper on this line of thinking.",
    0.95,
    0.95,
)
MERGE_SUGGESTION = CoachSuggestion(
    SuggestionType.MERGE,
    "Low connection density. Look for hidden relationships between your thoughts.",
    0.85,
    0.7,
)


# =============================================================================
# Engine
# =============================================================================


class QuantumReasoningEngine:
    """Stateless engine over synthetic strategy threads.

    Usage:
        engine = QuantumReasoningEngine()
        threads = engine.run_parallel_reasoning("Reduce churn")
        fused = engine.fuse(threads)
        print(engine.superhuman_score(threads))
    """

    # -------------------------------------------------------------------------
    # Parallel reasoning
    # -------------------------------------------------------------------------

    def run_parallel_reasoning(
        self,
        problem: str,
        strategies: Sequence[str] | None = None,
    ) -> list[ReasoningThread]:
        """Build one thread per strategy, ids numbered from 0.

        ``None`` or an empty list selects the default five strategies.
        """
        names = [s.value for s in DEFAULT_STRATEGIES] if not strategies else list(strategies)
        threads = []
        for thread_id, name in enumerate(names):
            thoughts = thoughts_for_strategy(problem, name, thread_id)
            threads.append(
                ReasoningThread(
                    id=thread_id,
                    strategy=name,
                    thoughts=thoughts,
                    performance=self.thread_performance(thoughts),
                )
            )
        return threads

    @staticmethod
    def thread_performance(thoughts: Sequence[QuantumThought]) -> float:
        if not thoughts:
            return 0.0
        return sum(t.confidence * t.optimization_score for t in thoughts) / len(thoughts)

    def fuse(self, threads: Sequence[ReasoningThread]) -> FusionResult:
        """Keep the top insights by confidence * breakthrough potential."""
        all_thoughts = [t for thread in threads for t in thread.thoughts]
        best = sorted(all_thoughts, key=lambda t: t.fusion_weight, reverse=True)[:FUSION_TOP_K]
        if not best:
            return FusionResult()
        return FusionResult(
            fused_insights=best,
            fusion_confidence=sum(t.confidence for t in best) / len(best),
            breakthrough_score=max(t.breakthrough_potential for t in best),
        )

    def detect_breakthroughs(self, fused: FusionResult) -> list[dict[str, Any]]:
        return [
            {
                "content": t.content,
                "potential": t.breakthrough_potential,
                "confidence": t.confidence,
            }
            for t in fused.fused_insights
            if t.breakthrough_potential > BREAKTHROUGH_THRESHOLD
        ]

    def superhuman_score(self, threads: Sequence[ReasoningThread]) -> float:
        if not threads:
            return 0.0
        mean_performance = sum(t.performance for t in threads) / len(threads)
        diversity_bonus = 0.1 * len(threads)
        breakthrough_bonus = (
            0.2
            if any(
                th.breakthrough_potential > SUPERHUMAN_BREAKTHROUGH_LEVEL
                for t in threads
                for th in t.thoughts
            )
            else 0.0
        )
        return min(1.0, mean_performance + diversity_bonus + breakthrough_bonus)

    def next_optimization(self, threads: Sequence[ReasoningThread]) -> dict[str, Any] | None:
        """Point at the weakest thread (first one on ties)."""
        if not threads:
            return None
        weakest = min(threads, key=lambda t: t.performance)
        return {
            "strategy": weakest.strategy,
            "performance": weakest.performance,
            "message": (
                f"Optimize {weakest.strategy} thread - "
                f"current performance: {weakest.performance:.2f}"
            ),
        }

    def quantum_reasoning(
        self,
        problem: str,
        strategies: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        """Full pipeline: threads, fusion, breakthroughs and scores."""
        threads = self.run_parallel_reasoning(problem, strategies)
        fused = self.fuse(threads)
        logger.debug(
            f"Quantum reasoning: {len(threads)} thread(s), "
            f"fusion_confidence={fused.fusion_confidence:.2f}"
        )
        return {
            "threads": threads,
            "fusion": fused,
            "breakthroughs": self.detect_breakthroughs(fused),
            "superhuman_score": self.superhuman_score(threads),
            "next_optimization": self.next_optimization(threads),
        }

    # -------------------------------------------------------------------------
    # Fusion analysis
    # -------------------------------------------------------------------------

    def fusion_analysis(self, threads: Sequence[ReasoningThread]) -> dict[str, Any]:
        """Group thoughts by thread id and summarise each group.

        Cluster keys are the thread ids as strings, in first-seen order.
        """
        clusters: dict[str, list[QuantumThought]] = {}
        for thread in threads:
            for thought in thread.thoughts:
                clusters.setdefault(str(thought.thread_id), []).append(thought)

        connections = [
            {"thread_id": thread.id, "thought": thought.content}
            for thread in threads
            for thought in thread.thoughts
        ]

        synthesized = [
            {
                "cluster": key,
                "insight_count": len(members),
                "top_insight": members[0].content if members else "No insights",
            }
            for key, members in clusters.items()
        ]

        return {
            "thought_clusters": {
                key: [t.model_dump() for t in members] for key, members in clusters.items()
            },
            "cross_connections": connections,
            "synthesized_insights": synthesized,
            "fusion_score": min(1.0, len(synthesized) * 0.2),
            "emergent_properties": list(EMERGENT_PROPERTIES) if len(synthesized) > 2 else [],
        }

    # -------------------------------------------------------------------------
    # Prediction and optimization
    # -------------------------------------------------------------------------

    def predict_outcome(self, solution: Any) -> dict[str, Any]:
        """Forecast success from the fixed stub factors."""
        factors = {
            "complexity": stub_complexity(solution),
            "feasibility": stub_feasibility(solution),
            "impact": stub_impact(solution),
            "risk": stub_risk(solution),
            "innovation": stub_innovation(solution),
        }
        success = (
            factors["feasibility"] + factors["impact"] - factors["risk"] + factors["innovation"]
        ) / 4
        return {
            "success_probability": clamp01(success),
            "failure_modes": list(FAILURE_MODES),
            "optimization_opportunities": list(OPTIMIZATION_OPPORTUNITIES),
            "implementation_score": factors["feasibility"],
            "breakthrough_potential": factors["innovation"],
            "factors": factors,
        }

    def optimize_thinking(self, session: Any) -> dict[str, Any]:
        performance = stub_session_performance(session)
        return {
            "current_efficiency": performance["efficiency"],
            "optimization_potential": performance["potential"],
            "bottlenecks": performance["bottlenecks"],
            "recommended_adjustments": {
                "strategy_adjustments": list(STRATEGY_ADJUSTMENTS),
                "focus_areas": list(FOCUS_AREAS),
                "efficiency_boosts": list(EFFICIENCY_BOOSTS),
                "breakthrough_paths": list(BREAKTHROUGH_PATHS),
            },
            "expected_improvement": EXPECTED_IMPROVEMENT,
        }

    # -------------------------------------------------------------------------
    # Coaching
    # -------------------------------------------------------------------------

    @staticmethod
    def thought_patterns(thoughts: Sequence[QuantumThought]) -> dict[str, float]:
        """Repetition, peak breakthrough potential and connection density."""
        if not thoughts:
            return {"repetitive": 0.0, "breakthrough_potential": 0.0, "connection_density": 0.0}
        return {
            "repetitive": REPETITION_SCORE if len(thoughts) > 1 else 0.0,
            "breakthrough_potential": max(t.breakthrough_potential for t in thoughts),
            "connection_density": sum(len(t.connections) for t in thoughts) / len(thoughts),
        }

    def ai_coach(self, thoughts: Sequence[QuantumThought]) -> list[CoachSuggestion]:
        """Advisory suggestions, strongest (confidence * impact) first."""
        patterns = self.thought_patterns(thoughts)
        suggestions = []
        if patterns["repetitive"] > PIVOT_THRESHOLD:
            suggestions.append(PIVOT_SUGGESTION)
        if patterns["breakthrough_potential"] > BREAKTHROUGH_COACH_THRESHOLD:
            suggestions.append(BREAKTHROUGH_SUGGESTION)
        if patterns["connection_density"] < MERGE_DENSITY_THRESHOLD:
            suggestions.append(MERGE_SUGGESTION)
        return sorted(suggestions, key=lambda s: s.weight, reverse=True)
