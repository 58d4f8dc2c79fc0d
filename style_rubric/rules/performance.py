"""Performance rules."""

from __future__ import annotations

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import LOOP_DEPTH, LOOP_STRING_CONCAT, RANGE_LEN_LOOP
from style_rubric.rules.base import RatioRule, Rule
from style_rubric.rules.predicates import at_most, is_false


def performance_rules(limits: RuleLimits) -> list[Rule]:
    return [
        RatioRule(
            rule_id="performance.range_len",
            category=Category.PERFORMANCE,
            weight=0.4,
            description="Loops iterate directly rather than over range(len(...)).",
            fact_kind=RANGE_LEN_LOOP,
            predicate=is_false,
            message="range(len(...)) loop in {subject}.",
            suggestion="Iterate directly or use enumerate() instead of range(len(...)).",
        ),
        RatioRule(
            rule_id="performance.loop_nesting",
            category=Category.PERFORMANCE,
            weight=0.3,
            description=f"Loops nest at most {limits.max_loop_depth} deep.",
            fact_kind=LOOP_DEPTH,
            predicate=at_most(limits.max_loop_depth),
            message="Function '{subject}' nests loops {value} deep.",
            suggestion="Flatten deeply nested loops with lookups or helper functions.",
        ),
        RatioRule(
            rule_id="performance.string_concat",
            category=Category.PERFORMANCE,
            weight=0.3,
            description="Loops do not build strings with repeated +=.",
            fact_kind=LOOP_STRING_CONCAT,
            predicate=is_false,
            message="String built with += inside a loop in {subject}.",
            suggestion="Collect parts in a list and join them once.",
        ),
    ]
