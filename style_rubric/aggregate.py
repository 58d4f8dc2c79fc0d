"""Aggregation of category scores into an evaluation report.

The overall score is a weighted mean of the reported (one-decimal) category
scores, so it matches the category lines of the rendered report. A run that is
missing any category is rejected instead of averaging over fewer categories.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from style_rubric.categories import ALL_CATEGORIES, Category
from style_rubric.config import resolve_category_weights
from style_rubric.errors import IncompleteEvaluationError
from style_rubric.facts import CODEBASE
from style_rubric.rules.base import Finding
from style_rubric.scoring import CategoryScore

DEFAULT_STRENGTH_THRESHOLD = 9.0
DEFAULT_WEAKNESS_THRESHOLD = 6.0
DEFAULT_MAX_RECOMMENDATIONS = 5


@dataclass(frozen=True, slots=True)
class Recommendation:
    """One templated improvement for a category."""

    category: Category
    kind: str
    text: str
    occurrences: int


@dataclass(frozen=True, slots=True)
class EvaluationReport:
    """Terminal artifact of an evaluation run."""

    overall_score: float
    category_scores: tuple[CategoryScore, ...]
    strengths: tuple[CategoryScore, ...]
    weaknesses: tuple[CategoryScore, ...]
    recommendations: tuple[Recommendation, ...]

    def __post_init__(self) -> None:
        if not 0.0 <= self.overall_score <= 10.0:
            raise ValueError(f"overall score must be within [0, 10], got {self.overall_score}")

    def score_for(self, category: Category) -> CategoryScore:
        for item in self.category_scores:
            if item.category is category:
                return item
        raise KeyError(category.value)

    @property
    def findings(self) -> tuple[Finding, ...]:
        return tuple(finding for item in self.category_scores for finding in item.findings)


def aggregate(
    category_scores: list[CategoryScore],
    *,
    weights: dict[Category, float] | None = None,
    strength_threshold: float = DEFAULT_STRENGTH_THRESHOLD,
    weakness_threshold: float = DEFAULT_WEAKNESS_THRESHOLD,
    max_recommendations: int = DEFAULT_MAX_RECOMMENDATIONS,
) -> EvaluationReport:
    """Combine the ten category scores into an ``EvaluationReport``."""
    by_category: dict[Category, CategoryScore] = {}
    for item in category_scores:
        if item.category in by_category:
            raise ValueError(f"Duplicate score for category '{item.category.value}'")
        by_category[item.category] = item

    missing = [category.value for category in ALL_CATEGORIES if category not in by_category]
    if missing:
        raise IncompleteEvaluationError(missing)

    resolved_weights = resolve_category_weights(weights)
    ordered = tuple(by_category[category] for category in ALL_CATEGORIES)

    weighted_total = sum(resolved_weights[item.category] * item.score for item in ordered)
    mean = weighted_total / sum(resolved_weights.values())
    if not math.isfinite(mean):
        raise ValueError(f"Overall score is not a finite number: {mean}")
    overall = round(_clamp(mean, lower=0.0, upper=10.0), 1)

    strengths = sorted(
        (item for item in ordered if item.score >= strength_threshold),
        key=lambda item: (-item.score, item.category.order),
    )
    weaknesses = sorted(
        (item for item in ordered if item.score <= weakness_threshold),
        key=lambda item: (item.score, item.category.order),
    )

    return EvaluationReport(
        overall_score=overall,
        category_scores=ordered,
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
        recommendations=build_recommendations(ordered, max_per_category=max_recommendations),
    )


def build_recommendations(
    category_scores: tuple[CategoryScore, ...] | list[CategoryScore],
    *,
    max_per_category: int = DEFAULT_MAX_RECOMMENDATIONS,
) -> tuple[Recommendation, ...]:
    """One sentence per distinct finding kind per category, capped per category.

    Kinds keep the order of their first finding; findings without a
    suggestion (for example vacuous notes) produce no recommendation.
    """
    if max_per_category <= 0:
        return ()

    recommendations: list[Recommendation] = []
    for item in sorted(category_scores, key=lambda score: score.category.order):
        grouped: dict[str, list[Finding]] = {}
        for finding in item.findings:
            if finding.suggestion:
                grouped.setdefault(finding.kind, []).append(finding)

        for kind, findings in list(grouped.items())[:max_per_category]:
            recommendations.append(
                Recommendation(
                    category=item.category,
                    kind=kind,
                    text=_recommendation_text(findings),
                    occurrences=len(findings),
                )
            )
    return tuple(recommendations)


def _recommendation_text(findings: list[Finding]) -> str:
    first = findings[0]
    count = len(findings)
    detail = f"{count} finding" if count == 1 else f"{count} findings"
    if first.location.file != CODEBASE:
        detail += f", first at {first.location}"
    return f"{first.suggestion.rstrip('.')} ({detail})."


def _clamp(value: float, *, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
