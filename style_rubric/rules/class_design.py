"""Class design rules."""

from __future__ import annotations

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import CLASS_BASES, CLASS_DOCSTRING_PRESENT, CLASS_METHOD_COUNT
from style_rubric.rules.base import RatioRule, Rule
from style_rubric.rules.predicates import at_most, is_public, is_true


def class_design_rules(limits: RuleLimits) -> list[Rule]:
    return [
        RatioRule(
            rule_id="class_design.docstrings",
            category=Category.CLASS_DESIGN,
            weight=0.4,
            description="Public classes carry a docstring.",
            fact_kind=CLASS_DOCSTRING_PRESENT,
            predicate=is_true,
            selector=is_public,
            message="Class '{subject}' has no docstring.",
            suggestion="Document each public class with a one-line docstring.",
        ),
        RatioRule(
            rule_id="class_design.method_count",
            category=Category.CLASS_DESIGN,
            weight=0.3,
            description=f"Classes define at most {limits.max_class_methods} methods.",
            fact_kind=CLASS_METHOD_COUNT,
            predicate=at_most(limits.max_class_methods),
            message="Class '{subject}' defines {value} methods.",
            suggestion="Split large classes by responsibility.",
        ),
        RatioRule(
            rule_id="class_design.base_count",
            category=Category.CLASS_DESIGN,
            weight=0.3,
            description=f"Classes inherit from at most {limits.max_class_bases} bases.",
            fact_kind=CLASS_BASES,
            predicate=at_most(limits.max_class_bases),
            message="Class '{subject}' inherits from {value} bases.",
            suggestion="Prefer composition over wide multiple inheritance.",
        ),
    ]
