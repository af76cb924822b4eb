"""Request models for the analysis tools.

Pydantic models for the open JSON objects callers send to
``plan_solution`` and ``evaluate_options``. Separated from logic for
clean imports and testability.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from seqthink.utils.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


class SolutionInput(BaseModel):
    """A candidate solution for planning.

    ``effort``, ``impact`` and ``risk`` are normally low/medium/high; other
    values are accepted and score as medium.
    """

    model_config = ConfigDict(extra="allow")

    title: str = Field(min_length=1)
    description: str
    effort: str
    impact: str
    risk: str
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class OptionInput(BaseModel):
    """An option under multi-criteria evaluation."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    description: str = ""
    criteria: dict[str, float] = Field(default_factory=dict)


class CriterionInput(BaseModel):
    """A weighted evaluation criterion."""

    name: str = Field(min_length=1)
    weight: float
    description: str | None = None


def parse_items(model: type[M], items: Sequence[Any], field: str) -> list[M]:
    """Validate a list of raw objects into models.

    Raises:
        ValidationError: Naming the offending element, e.g. ``solutions[1].effort``.

    """
    parsed: list[M] = []
    for i, item in enumerate(items):
        try:
            parsed.append(model.model_validate(item))
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e, prefix=f"{field}[{i}]") from e
    return parsed
