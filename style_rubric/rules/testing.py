"""Testing rules."""

from __future__ import annotations

from dataclasses import dataclass

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import (
    TEST_ASSERTIONS,
    TEST_FILE,
    TEST_NAME,
    FactModel,
    Location,
    SourceFact,
)
from style_rubric.rules.base import RatioRule, Rule, RuleResult, finding_for
from style_rubric.rules.predicates import at_least

TARGET_TEST_RATIO = 0.5
MIN_TEST_NAME_SUFFIX = 4


@dataclass(frozen=True, slots=True)
class HasTestsRule:
    """Scores whether the codebase ships any test modules."""

    rule_id: str = "testing.tests_present"
    category: Category = Category.TESTING
    weight: float = 0.4
    description: str = "The codebase contains test modules."

    def evaluate(self, facts: FactModel) -> RuleResult:
        observed = facts.of_kind(TEST_FILE)
        if not observed:
            return RuleResult.not_applicable()
        if facts.counters.test_files > 0:
            return RuleResult(score=1.0)
        return RuleResult(
            score=0.0,
            findings=(
                finding_for(
                    self,
                    Location.codebase(),
                    f"No test modules found among {len(observed)} modules.",
                    "Add a tests/ package with pytest modules for the public behavior.",
                ),
            ),
        )


@dataclass(frozen=True, slots=True)
class CoverageRatioRule:
    """Scores the ratio of test modules to source modules."""

    rule_id: str = "testing.test_ratio"
    category: Category = Category.TESTING
    weight: float = 0.2
    description: str = (
        f"At least {TARGET_TEST_RATIO:.0%} as many test modules as source modules."
    )

    def evaluate(self, facts: FactModel) -> RuleResult:
        counters = facts.counters
        if counters.source_files <= 0:
            return RuleResult.not_applicable()

        ratio = counters.test_files / counters.source_files
        score = min(1.0, ratio / TARGET_TEST_RATIO)
        if score >= 1.0:
            return RuleResult(score=1.0)
        return RuleResult(
            score=score,
            findings=(
                finding_for(
                    self,
                    Location.codebase(),
                    (
                        f"{counters.test_files} test modules for "
                        f"{counters.source_files} source modules."
                    ),
                    "Add test modules for untested source modules.",
                ),
            ),
        )


def _is_descriptive_test_name(fact: SourceFact) -> bool:
    name = fact.label
    if not name.startswith("test_"):
        return False
    return len(name) - len("test_") >= MIN_TEST_NAME_SUFFIX


def testing_rules(limits: RuleLimits) -> list[Rule]:
    _ = limits
    return [
        HasTestsRule(),
        CoverageRatioRule(),
        RatioRule(
            rule_id="testing.test_names",
            category=Category.TESTING,
            weight=0.2,
            description="Test functions have descriptive test_ names.",
            fact_kind=TEST_NAME,
            predicate=_is_descriptive_test_name,
            message="Test '{value}' does not describe the behavior it checks.",
            suggestion="Name tests after the behavior they verify, e.g. test_parser_rejects_empty.",
        ),
        RatioRule(
            rule_id="testing.assertions",
            category=Category.TESTING,
            weight=0.2,
            description="Every test function asserts something.",
            fact_kind=TEST_ASSERTIONS,
            predicate=at_least(1),
            message="Test '{subject}' contains no assertions.",
            suggestion="Assert on outcomes in every test function.",
        ),
    ]
