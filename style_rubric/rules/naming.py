"""Naming convention rules."""

from __future__ import annotations

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import ARGUMENT_NAME, CLASS_NAME, FUNCTION_NAME
from style_rubric.rules.base import RatioRule, Rule
from style_rubric.rules.predicates import is_cap_words, is_descriptive, is_snake_case


def naming_rules(limits: RuleLimits) -> list[Rule]:
    _ = limits
    return [
        RatioRule(
            rule_id="naming.function_names",
            category=Category.NAMING,
            weight=0.4,
            description="Functions and methods use snake_case names.",
            fact_kind=FUNCTION_NAME,
            predicate=is_snake_case,
            message="Function '{value}' is not snake_case.",
            suggestion="Rename functions and methods to snake_case.",
        ),
        RatioRule(
            rule_id="naming.class_names",
            category=Category.NAMING,
            weight=0.3,
            description="Classes use CapWords names.",
            fact_kind=CLASS_NAME,
            predicate=is_cap_words,
            message="Class '{value}' is not CapWords.",
            suggestion="Rename classes to CapWords.",
        ),
        RatioRule(
            rule_id="naming.argument_names",
            category=Category.NAMING,
            weight=0.2,
            description="Arguments use snake_case names.",
            fact_kind=ARGUMENT_NAME,
            predicate=is_snake_case,
            message="Argument '{value}' of {subject} is not snake_case.",
            suggestion="Rename arguments to snake_case.",
        ),
        RatioRule(
            rule_id="naming.descriptive_arguments",
            category=Category.NAMING,
            weight=0.1,
            description="Arguments avoid unconventional single-letter names.",
            fact_kind=ARGUMENT_NAME,
            predicate=is_descriptive,
            message="Argument '{value}' of {subject} is a single letter.",
            suggestion="Give single-letter arguments descriptive names.",
        ),
    ]
