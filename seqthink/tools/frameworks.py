"""Analysis frameworks and scoring heuristics.

Pure functions behind ``analyze_problem``, ``plan_solution`` and
``evaluate_options``. Nothing here touches sessions or I/O.

Solution scoring:
    effort, impact and risk each map onto a 3-point scale (unknown values
    score 2), and the sum (3..9) is rescaled to an integer 0..10.

Option scoring:
    weighted average of per-criterion values; a missing criterion value
    counts as 0 and a zero total weight scores 0.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from seqthink.tools.request_types import CriterionInput, OptionInput, SolutionInput

# =============================================================================
# Framework catalogue
# =============================================================================


@dataclass(frozen=True)
class Framework:
    """A named problem-analysis framework."""

    key: str
    title: str
    steps: tuple[str, ...]
    next_steps: tuple[str, ...]


FRAMEWORKS: dict[str, Framework] = {
    "swot": Framework(
        key="swot",
        title="SWOT Analysis",
        steps=("Strengths", "Weaknesses", "Opportunities", "Threats"),
        next_steps=(
            "Leverage strengths",
            "Address weaknesses",
            "Capitalize on opportunities",
            "Mitigate threats",
        ),
    ),
    "root-cause": Framework(
        key="root-cause",
        title="5-Why Root Cause Analysis",
        steps=(
            "Problem definition",
            "Why 1",
            "Why 2",
            "Why 3",
            "Why 4",
            "Why 5",
            "Root cause",
        ),
        next_steps=(
            "Address root cause",
            "Implement preventive measures",
            "Monitor results",
        ),
    ),
    "design-thinking": Framework(
        key="design-thinking",
        title="Design Thinking Process",
        steps=("Empathize", "Define", "Ideate", "Prototype", "Test"),
        next_steps=(
            "User research",
            "Problem framing",
            "Solution brainstorming",
            "Rapid prototyping",
            "User testing",
        ),
    ),
    "systems": Framework(
        key="systems",
        title="Systems Thinking",
        steps=(
            "System boundaries",
            "Stakeholders",
            "Relationships",
            "Feedback loops",
            "Leverage points",
        ),
        next_steps=(
            "Map system dynamics",
            "Identify intervention points",
            "Design system changes",
        ),
    ),
}

DEFAULT_FRAMEWORK = "swot"


def get_framework(name: str) -> Framework:
    """Look up a framework by key; unknown names fall back to SWOT."""
    return FRAMEWORKS.get(name, FRAMEWORKS[DEFAULT_FRAMEWORK])


def _listed(items: Sequence[str] | None, placeholder: str) -> str:
    return ", ".join(items) if items else placeholder


def apply_framework(
    problem: str,
    framework: Framework,
    context: str | None = None,
    stakeholders: Sequence[str] | None = None,
    constraints: Sequence[str] | None = None,
    objectives: Sequence[str] | None = None,
) -> str:
    """Narrative description of a framework applied to a problem.

    Absent optional fields render as explicit placeholders.
    """
    return (
        f"Applied {framework.title} to analyze: {problem}\n\n"
        f"Framework steps: {' → '.join(framework.steps)}\n\n"
        f"Context: {context or 'Not provided'}\n"
        f"Stakeholders: {_listed(stakeholders, 'Not specified')}\n"
        f"Constraints: {_listed(constraints, 'None specified')}\n"
        f"Objectives: {_listed(objectives, 'Not specified')}"
    )


# =============================================================================
# Solution scoring
# =============================================================================

EFFORT_SCALE = {"low": 3, "medium": 2, "high": 1}
IMPACT_SCALE = {"low": 1, "medium": 2, "high": 3}
RISK_SCALE = {"low": 3, "medium": 2, "high": 1}
UNKNOWN_LEVEL_SCORE = 2


def score_solution(effort: str, impact: str, risk: str) -> int:
    """Score a solution 0..10 from its effort, impact and risk levels."""
    total = (
        EFFORT_SCALE.get(effort, UNKNOWN_LEVEL_SCORE)
        + IMPACT_SCALE.get(impact, UNKNOWN_LEVEL_SCORE)
        + RISK_SCALE.get(risk, UNKNOWN_LEVEL_SCORE)
    )
    return round(total * 10 / 9)


def _score(solution: SolutionInput) -> int:
    return score_solution(solution.effort, solution.impact, solution.risk)


def evaluate_solutions(solutions: Sequence[SolutionInput]) -> str:
    lines = [
        f"{s.title}: Score {_score(s)}/10 "
        f"(Effort: {s.effort}, Impact: {s.impact}, Risk: {s.risk})"
        for s in solutions
    ]
    return "Solution Analysis:\n" + "\n".join(lines)


def recommend_solution(solutions: Sequence[SolutionInput]) -> str:
    """Pick the highest-scoring solution; ties go to the earliest.

    Raises:
        ValueError: If ``solutions`` is empty.

    """
    if not solutions:
        raise ValueError("at least one solution is required")
    # max() keeps the first of equal keys
    best = max(solutions, key=_score)
    return f"Recommended: {best.title} (Score: {_score(best)}/10)"


# =============================================================================
# Multi-criteria option evaluation
# =============================================================================


def score_options(
    options: Sequence[OptionInput],
    criteria: Sequence[CriterionInput],
) -> dict[str, float]:
    """Weighted average score per option name.

    Options sharing a name collapse to the last one's score.
    """
    total_weight = sum(c.weight for c in criteria)
    scores: dict[str, float] = {}
    for option in options:
        weighted = sum(option.criteria.get(c.name, 0.0) * c.weight for c in criteria)
        scores[option.name] = weighted / total_weight if total_weight else 0.0
    return scores


def rank_options(
    scores: dict[str, float],
    options: Sequence[OptionInput],
) -> list[dict[str, Any]]:
    """Options with their scores, best first (stable for ties)."""
    ranked = [{**option.model_dump(), "score": scores[option.name]} for option in options]
    return sorted(ranked, key=lambda entry: entry["score"], reverse=True)


def evaluation_analysis(
    ranking: Sequence[dict[str, Any]],
    criteria: Sequence[CriterionInput],
) -> str:
    """Summary of the winning option and the criteria used.

    Raises:
        ValueError: If ``ranking`` is empty.

    """
    if not ranking:
        raise ValueError("ranking is empty")
    winner = ranking[0]
    criteria_text = ", ".join(f"{c.name} (weight: {c.weight:g})" for c in criteria)
    return (
        f"Top choice: {winner['name']} with score {winner['score']:.2f}\n"
        f"Evaluation criteria: {criteria_text}\n"
        f"Key differentiators: {winner.get('description', '')}"
    )
