"""Function design rules."""

from __future__ import annotations

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import (
    DOCSTRING_PRESENT,
    FUNCTION_ARGS,
    FUNCTION_COMPLEXITY,
    FUNCTION_LENGTH,
)
from style_rubric.rules.base import RatioRule, Rule
from style_rubric.rules.predicates import at_most, is_public, is_true


def function_design_rules(limits: RuleLimits) -> list[Rule]:
    return [
        RatioRule(
            rule_id="function_design.length",
            category=Category.FUNCTION_DESIGN,
            weight=0.35,
            description=f"Functions stay within {limits.max_function_length} lines.",
            fact_kind=FUNCTION_LENGTH,
            predicate=at_most(limits.max_function_length),
            message="Function '{subject}' spans {value} lines.",
            suggestion=(
                f"Split functions longer than {limits.max_function_length} lines "
                "into smaller helpers."
            ),
        ),
        RatioRule(
            rule_id="function_design.docstrings",
            category=Category.FUNCTION_DESIGN,
            weight=0.3,
            description="Public functions carry a docstring.",
            fact_kind=DOCSTRING_PRESENT,
            predicate=is_true,
            selector=is_public,
            message="Public function '{subject}' has no docstring.",
            suggestion="Add docstrings to public functions.",
        ),
        RatioRule(
            rule_id="function_design.arguments",
            category=Category.FUNCTION_DESIGN,
            weight=0.15,
            description=f"Functions take at most {limits.max_arguments} arguments.",
            fact_kind=FUNCTION_ARGS,
            predicate=at_most(limits.max_arguments),
            message="Function '{subject}' takes {value} arguments.",
            suggestion="Group related arguments into a dataclass or keyword-only options.",
        ),
        RatioRule(
            rule_id="function_design.complexity",
            category=Category.FUNCTION_DESIGN,
            weight=0.2,
            description=f"Function branch complexity stays within {limits.max_complexity}.",
            fact_kind=FUNCTION_COMPLEXITY,
            predicate=at_most(limits.max_complexity),
            message="Function '{subject}' has complexity {value}.",
            suggestion="Reduce branching with early returns or extracted helpers.",
        ),
    ]
