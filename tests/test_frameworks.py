"""Unit tests for analysis frameworks and scoring heuristics."""

from __future__ import annotations

from typing import Any

import pytest

from seqthink.tools.frameworks import (
    FRAMEWORKS,
    apply_framework,
    evaluate_solutions,
    evaluation_analysis,
    get_framework,
    rank_options,
    recommend_solution,
    score_options,
    score_solution,
)
from seqthink.tools.request_types import (
    CriterionInput,
    OptionInput,
    SolutionInput,
    parse_items,
)
from seqthink.utils.errors import ValidationError


def _solution(title: str, effort: str, impact: str, risk: str) -> SolutionInput:
    return SolutionInput(title=title, description="", effort=effort, impact=impact, risk=risk)


class TestFrameworkCatalogue:
    """Framework lookup."""

    def test_known_frameworks(self) -> None:
        assert set(FRAMEWORKS) == {"swot", "root-cause", "design-thinking", "systems"}

    def test_root_cause_steps(self) -> None:
        fw = get_framework("root-cause")
        assert fw.title == "5-Why Root Cause Analysis"
        assert fw.steps[0] == "Problem definition"
        assert fw.steps[-1] == "Root cause"
        assert len(fw.steps) == 7

    def test_unknown_falls_back_to_swot(self) -> None:
        assert get_framework("six-hats") is FRAMEWORKS["swot"]


class TestApplyFramework:
    """Narrative generation."""

    def test_placeholders_for_absent_fields(self) -> None:
        text = apply_framework("Slow builds", get_framework("swot"))

        assert text.startswith("Applied SWOT Analysis to analyze: Slow builds")
        assert "Framework steps: Strengths → Weaknesses → Opportunities → Threats" in text
        assert "Context: Not provided" in text
        assert "Stakeholders: Not specified" in text
        assert "Constraints: None specified" in text
        assert "Objectives: Not specified" in text

    def test_provided_fields_rendered(self) -> None:
        text = apply_framework(
            "Slow builds",
            get_framework("systems"),
            context="Monorepo",
            stakeholders=["devs", "ops"],
            constraints=["budget"],
            objectives=["halve build time"],
        )

        assert "Context: Monorepo" in text
        assert "Stakeholders: devs, ops" in text
        assert "Constraints: budget" in text
        assert "Objectives: halve build time" in text

    def test_empty_lists_use_placeholders(self) -> None:
        text = apply_framework("p", get_framework("swot"), stakeholders=[], constraints=[])
        assert "Stakeholders: Not specified" in text
        assert "Constraints: None specified" in text


class TestScoreSolution:
    """Effort/impact/risk scoring."""

    def test_medium_high_low_scores_nine(self) -> None:
        assert score_solution("medium", "high", "low") == 9

    def test_best_and_worst(self) -> None:
        assert score_solution("low", "high", "low") == 10
        assert score_solution("high", "low", "high") == 3

    def test_unknown_levels_score_as_medium(self) -> None:
        assert score_solution("huge", "tiny", "??") == score_solution("medium", "medium", "medium")
        assert score_solution("medium", "medium", "medium") == 7

    @pytest.mark.parametrize("effort", ["low", "medium", "high", "other"])
    @pytest.mark.parametrize("impact", ["low", "medium", "high", "other"])
    @pytest.mark.parametrize("risk", ["low", "medium", "high", "other"])
    def test_range(self, effort: str, impact: str, risk: str) -> None:
        assert 0 <= score_solution(effort, impact, risk) <= 10


class TestSolutions:
    """Solution analysis and recommendation."""

    def test_evaluate_solutions_text(self) -> None:
        text = evaluate_solutions([_solution("Index", "medium", "high", "low")])
        assert text == "Solution Analysis:\nIndex: Score 9/10 (Effort: medium, Impact: high, Risk: low)"

    def test_recommend_highest(self) -> None:
        solutions = [
            _solution("Rewrite", "high", "high", "medium"),
            _solution("Index", "medium", "high", "low"),
        ]
        assert recommend_solution(solutions) == "Recommended: Index (Score: 9/10)"

    def test_recommend_tie_keeps_first(self) -> None:
        solutions = [
            _solution("First", "medium", "medium", "medium"),
            _solution("Second", "medium", "medium", "medium"),
        ]
        assert recommend_solution(solutions).startswith("Recommended: First")

    def test_recommend_empty(self) -> None:
        with pytest.raises(ValueError):
            recommend_solution([])


class TestOptions:
    """Weighted multi-criteria scoring."""

    def test_weighted_scores(
        self, sample_options: list[dict[str, Any]], sample_criteria: list[dict[str, Any]]
    ) -> None:
        options = parse_items(OptionInput, sample_options, "options")
        criteria = parse_items(CriterionInput, sample_criteria, "criteria")

        scores = score_options(options, criteria)

        assert scores["A"] == pytest.approx(8.05)
        assert scores["B"] == pytest.approx(6.6)

        ranking = rank_options(scores, options)
        assert [r["name"] for r in ranking] == ["A", "B"]

    def test_missing_criterion_counts_zero(self) -> None:
        options = [OptionInput(name="X", criteria={"cost": 10})]
        criteria = [CriterionInput(name="cost", weight=1), CriterionInput(name="speed", weight=1)]
        assert score_options(options, criteria) == {"X": 5.0}

    def test_zero_total_weight(self) -> None:
        options = [OptionInput(name="X", criteria={"cost": 10})]
        criteria = [CriterionInput(name="cost", weight=0)]
        assert score_options(options, criteria) == {"X": 0.0}

    def test_no_criteria(self) -> None:
        options = [OptionInput(name="X"), OptionInput(name="Y")]
        assert score_options(options, []) == {"X": 0.0, "Y": 0.0}

    def test_rank_is_stable(self) -> None:
        options = [OptionInput(name=n) for n in ("p", "q", "r")]
        ranking = rank_options({"p": 1.0, "q": 2.0, "r": 1.0}, options)
        assert [r["name"] for r in ranking] == ["q", "p", "r"]

    def test_evaluation_analysis(
        self, sample_options: list[dict[str, Any]], sample_criteria: list[dict[str, Any]]
    ) -> None:
        options = parse_items(OptionInput, sample_options, "options")
        criteria = parse_items(CriterionInput, sample_criteria, "criteria")
        ranking = rank_options(score_options(options, criteria), options)

        text = evaluation_analysis(ranking, criteria)

        assert text.startswith("Top choice: A with score 8.05\n")
        assert "cost (weight: 0.3), scalability (weight: 0.3)" in text
        assert text.endswith("Key differentiators: Managed cloud database")


class TestRequestParsing:
    """Boundary validation of solution/option payloads."""

    def test_missing_field_named_with_position(self, sample_solutions: list[dict[str, Any]]) -> None:
        broken = [sample_solutions[0], {**sample_solutions[1]}]
        del broken[1]["effort"]

        with pytest.raises(ValidationError) as exc_info:
            parse_items(SolutionInput, broken, "solutions")

        assert exc_info.value.field == "solutions[1].effort"

    def test_non_numeric_criterion_value(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_items(OptionInput, [{"name": "A", "criteria": {"cost": "cheap"}}], "options")

        assert exc_info.value.field == "options[0].criteria.cost"

    def test_extra_solution_fields_kept(self, sample_solutions: list[dict[str, Any]]) -> None:
        parsed = parse_items(SolutionInput, [{**sample_solutions[0], "owner": "ana"}], "solutions")
        assert parsed[0].model_dump()["owner"] == "ana"
