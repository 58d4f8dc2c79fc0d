"""Error-handling rules."""

from __future__ import annotations

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import BARE_EXCEPT, BROAD_EXCEPT, SWALLOWED_EXCEPTION
from style_rubric.rules.base import RatioRule, Rule
from style_rubric.rules.predicates import is_false


def error_handling_rules(limits: RuleLimits) -> list[Rule]:
    _ = limits
    return [
        RatioRule(
            rule_id="error_handling.bare_except",
            category=Category.ERROR_HANDLING,
            weight=0.5,
            description="Exception handlers name the exceptions they catch.",
            fact_kind=BARE_EXCEPT,
            predicate=is_false,
            message="Bare except in {subject}.",
            suggestion="Catch specific exception types instead of using a bare except.",
        ),
        RatioRule(
            rule_id="error_handling.broad_except",
            category=Category.ERROR_HANDLING,
            weight=0.25,
            description="Handlers avoid catching Exception or BaseException.",
            fact_kind=BROAD_EXCEPT,
            predicate=is_false,
            message="Broad exception handler in {subject}.",
            suggestion="Narrow broad exception handlers to the failures you expect.",
        ),
        RatioRule(
            rule_id="error_handling.swallowed",
            category=Category.ERROR_HANDLING,
            weight=0.25,
            description="Handlers do not silently discard exceptions.",
            fact_kind=SWALLOWED_EXCEPTION,
            predicate=is_false,
            message="Exception silently swallowed in {subject}.",
            suggestion="Log or re-raise exceptions instead of passing silently.",
        ),
    ]
