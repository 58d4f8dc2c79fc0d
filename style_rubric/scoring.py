"""Category evaluation: run a category's rules and combine their results."""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass

from style_rubric.categories import Category
from style_rubric.errors import EvaluationTimeoutError
from style_rubric.facts import FactModel, Location
from style_rubric.rules import RuleRegistry, default_registry
from style_rubric.rules.base import RULE_ERROR, VACUOUS, Finding, Rule, RuleResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    """How one rule contributed to its category score."""

    rule_id: str
    weight: float
    score: float
    applicable: bool
    failed: bool = False


@dataclass(frozen=True, slots=True)
class CategoryScore:
    """Score for one category on a 0-10 scale plus its findings."""

    category: Category
    raw_score: float
    findings: tuple[Finding, ...] = ()
    rule_outcomes: tuple[RuleOutcome, ...] = ()
    vacuous: bool = False

    def __post_init__(self) -> None:
        if not 0.0 <= self.raw_score <= 10.0:
            raise ValueError(
                f"Category score for '{self.category.value}' must be within [0, 10], "
                f"got {self.raw_score}"
            )

    @property
    def score(self) -> float:
        """Score rounded to one decimal, as reported."""
        return round(self.raw_score, 1)


def evaluate(
    category: Category,
    fact_model: FactModel,
    registry: RuleRegistry | None = None,
    *,
    active_rule_ids: frozenset[str] | None = None,
) -> CategoryScore:
    """Evaluate one category's rules against the fact model.

    A rule that raises or returns a malformed result contributes a score of 0
    and a ``rule_error:<rule id>`` finding; the remaining rules still run. When no rule
    applies, the category is vacuously compliant and scores 10.
    """
    active_registry = registry if registry is not None else default_registry()
    rules = [
        rule
        for rule in active_registry.rules_for(category)
        if active_rule_ids is None or rule.rule_id in active_rule_ids
    ]

    outcomes: list[RuleOutcome] = []
    findings: list[Finding] = []
    for rule in rules:
        result, failed = _run_rule(rule, fact_model)
        outcomes.append(
            RuleOutcome(
                rule_id=rule.rule_id,
                weight=rule.weight,
                score=result.score,
                applicable=result.applicable,
                failed=failed,
            )
        )
        if result.applicable:
            findings.extend(result.findings)

    applicable = [outcome for outcome in outcomes if outcome.applicable]
    if not applicable:
        findings.append(
            Finding(
                rule_id=VACUOUS,
                kind=VACUOUS,
                message=(
                    f"No applicable rules or facts for {category.label}; "
                    "scored as vacuously compliant."
                ),
                location=Location.codebase(),
            )
        )
        return CategoryScore(
            category=category,
            raw_score=10.0,
            findings=tuple(findings),
            rule_outcomes=tuple(outcomes),
            vacuous=True,
        )

    total_weight = sum(outcome.weight for outcome in applicable)
    weighted = sum(outcome.weight * outcome.score for outcome in applicable)
    average = _clamp(weighted / total_weight)
    return CategoryScore(
        category=category,
        raw_score=10.0 * average,
        findings=tuple(findings),
        rule_outcomes=tuple(outcomes),
    )


def evaluate_all(
    fact_model: FactModel,
    registry: RuleRegistry | None = None,
    *,
    active_rule_ids: frozenset[str] | None = None,
    max_workers: int | None = None,
    budget_seconds: float | None = None,
) -> list[CategoryScore]:
    """Evaluate every category that has registered rules, in parallel.

    Results come back in category declaration order once all categories have
    finished. Categories without registered rules are skipped, which the
    aggregator reports as an incomplete evaluation.
    """
    active_registry = registry if registry is not None else default_registry()
    categories = active_registry.categories()
    if not categories:
        return []

    start = time.perf_counter()
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="style-rubric")
    try:
        futures = {
            category: executor.submit(
                evaluate,
                category,
                fact_model,
                active_registry,
                active_rule_ids=active_rule_ids,
            )
            for category in categories
        }
        _, pending = wait(futures.values(), timeout=budget_seconds)
        if pending:
            unfinished = [
                category.value for category, future in futures.items() if future in pending
            ]
            raise EvaluationTimeoutError(
                f"Evaluation exceeded its budget of {budget_seconds}s; "
                f"unfinished categories: {', '.join(unfinished)}"
            )
        scores = [futures[category].result() for category in categories]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    logger.debug("Evaluated %d categories in %d ms", len(scores), elapsed_ms)
    return scores


def _run_rule(rule: Rule, fact_model: FactModel) -> tuple[RuleResult, bool]:
    try:
        result = rule.evaluate(fact_model)
        _check_result(result, fact_model)
    except Exception as exc:  # a broken rule must not abort its category
        logger.warning(
            "Rule %s failed during evaluation: %s: %s",
            rule.rule_id,
            exc.__class__.__name__,
            exc,
        )
        failure = Finding(
            rule_id=rule.rule_id,
            kind=f"{RULE_ERROR}:{rule.rule_id}",
            message=f"Rule '{rule.rule_id}' failed: {exc.__class__.__name__}: {exc}",
            location=Location.codebase(),
            suggestion=f"Check the facts consumed by rule '{rule.rule_id}' or disable it.",
        )
        return (RuleResult(score=0.0, findings=(failure,)), True)

    if not result.applicable:
        return (result, False)
    return (RuleResult(score=_clamp(result.score), findings=result.findings), False)


def _check_result(result: object, fact_model: FactModel) -> None:
    if not isinstance(result, RuleResult):
        raise TypeError(f"expected RuleResult, got {type(result).__name__}")
    if not math.isfinite(result.score):
        raise ValueError(f"score {result.score} is not a finite number")
    for finding in result.findings:
        if not fact_model.contains(finding.location):
            raise ValueError(f"finding location {finding.location} is outside the codebase")


def _clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))
