"""Layout and formatting rules."""

from __future__ import annotations

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import IMPORT_GROUP_ORDER, LINE_LENGTH, WILDCARD_IMPORT
from style_rubric.rules.base import RatioRule, Rule
from style_rubric.rules.predicates import at_most, is_false, is_true


def layout_rules(limits: RuleLimits) -> list[Rule]:
    return [
        RatioRule(
            rule_id="layout.line_length",
            category=Category.LAYOUT,
            weight=0.4,
            description=f"Modules keep lines within {limits.max_line_length} characters.",
            fact_kind=LINE_LENGTH,
            predicate=at_most(limits.max_line_length),
            message="Longest line in {file} is {value} characters.",
            suggestion=f"Wrap lines longer than {limits.max_line_length} characters.",
        ),
        RatioRule(
            rule_id="layout.import_grouping",
            category=Category.LAYOUT,
            weight=0.35,
            description="Imports are grouped standard library, third party, then local.",
            fact_kind=IMPORT_GROUP_ORDER,
            predicate=is_true,
            message="Imports in {file} are not grouped stdlib, third-party, local.",
            suggestion="Group imports as standard library, third-party, then local modules.",
        ),
        RatioRule(
            rule_id="layout.wildcard_imports",
            category=Category.LAYOUT,
            weight=0.25,
            description="Modules avoid wildcard imports.",
            fact_kind=WILDCARD_IMPORT,
            predicate=is_false,
            message="Wildcard import from {subject}.",
            suggestion="Replace wildcard imports with explicit names.",
        ),
    ]
