"""Rules package: the static rubric table and the process-wide registry."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from functools import cache

from style_rubric.categories import ALL_CATEGORIES, Category
from style_rubric.config import RuleLimits
from style_rubric.errors import (
    ConfigError,
    DuplicateRuleError,
    InvalidWeightError,
    RegistryFrozenError,
)
from style_rubric.rules.base import Finding, Rule, RuleInfo, RuleResult
from style_rubric.rules.class_design import class_design_rules
from style_rubric.rules.configuration import configuration_rules
from style_rubric.rules.error_handling import error_handling_rules
from style_rubric.rules.function_design import function_design_rules
from style_rubric.rules.layout import layout_rules
from style_rubric.rules.log_usage import logging_rules
from style_rubric.rules.naming import naming_rules
from style_rubric.rules.performance import performance_rules
from style_rubric.rules.testing import testing_rules
from style_rubric.rules.version_control import version_control_rules

__all__ = [
    "Finding",
    "Rule",
    "RuleInfo",
    "RuleRegistry",
    "RuleResult",
    "build_registry",
    "default_registry",
    "list_rule_info",
    "resolve_active_rule_ids",
]

logger = logging.getLogger(__name__)

WEIGHT_EPSILON = 1e-6

_CATEGORY_TABLES: tuple[Callable[[RuleLimits], list[Rule]], ...] = (
    layout_rules,
    naming_rules,
    function_design_rules,
    class_design_rules,
    error_handling_rules,
    configuration_rules,
    testing_rules,
    logging_rules,
    performance_rules,
    version_control_rules,
)


class RuleRegistry:
    """Catalog of rules keyed by id and grouped by category.

    Rules are registered at startup, then the registry is frozen and only
    read from. Registration order is kept per category so that evaluation and
    reporting stay deterministic.
    """

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}
        self._by_category: dict[Category, list[Rule]] = {}
        self._frozen = False

    def register(self, rule: Rule) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{rule.rule_id}': the rule registry is frozen."
            )
        if rule.rule_id in self._rules:
            raise DuplicateRuleError(rule.rule_id)
        if not 0.0 < rule.weight <= 1.0:
            raise InvalidWeightError(
                f"Rule '{rule.rule_id}' has weight {rule.weight}; "
                "weights must be in (0, 1].",
                category=rule.category.value,
                weight=rule.weight,
            )

        current = self.category_weight(rule.category)
        if current + rule.weight > 1.0 + WEIGHT_EPSILON:
            raise InvalidWeightError(
                f"Registering '{rule.rule_id}' (weight {rule.weight}) would raise the "
                f"'{rule.category.value}' weight sum to {current + rule.weight:.6f}, "
                "above 1.0.",
                category=rule.category.value,
                weight=current + rule.weight,
            )

        self._rules[rule.rule_id] = rule
        self._by_category.setdefault(rule.category, []).append(rule)

    def freeze(self) -> RuleRegistry:
        """Validate complete category weights and make the registry read-only."""
        for category, rules in self._by_category.items():
            total = sum(rule.weight for rule in rules)
            if abs(total - 1.0) > WEIGHT_EPSILON:
                raise InvalidWeightError(
                    f"Rule weights for '{category.value}' sum to {total:.6f}, expected 1.0.",
                    category=category.value,
                    weight=total,
                )
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def rules_for(self, category: Category) -> tuple[Rule, ...]:
        return tuple(self._by_category.get(category, ()))

    def category_weight(self, category: Category) -> float:
        return sum(rule.weight for rule in self._by_category.get(category, ()))

    def categories(self) -> tuple[Category, ...]:
        """Categories with at least one rule, in declaration order."""
        return tuple(category for category in ALL_CATEGORIES if category in self._by_category)

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise KeyError(f"Unknown rule id: {rule_id}") from None

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        for category in self.categories():
            yield from self._by_category[category]

    def __len__(self) -> int:
        return len(self._rules)


def build_registry(limits: RuleLimits | None = None) -> RuleRegistry:
    """Register the static rule table for every category and freeze it."""
    effective_limits = limits or RuleLimits()
    registry = RuleRegistry()
    for table in _CATEGORY_TABLES:
        for rule in table(effective_limits):
            registry.register(rule)
    logger.debug("Built rule registry with %d rules", len(registry))
    return registry.freeze()


@cache
def default_registry() -> RuleRegistry:
    """Return the process-wide registry built from default limits."""
    return build_registry()


def resolve_active_rule_ids(
    registry: RuleRegistry,
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
) -> frozenset[str]:
    """Apply enable/disable selections; unknown ids are configuration errors."""
    requested = set(enabled_rule_ids or []) | set(disabled_rule_ids or [])
    unknown = sorted(rule_id for rule_id in requested if rule_id not in registry)
    if unknown:
        raise ConfigError(f"Unknown rule ids: {', '.join(unknown)}")

    disabled = set(disabled_rule_ids or [])
    if enabled_rule_ids is None:
        selected = {rule.rule_id for rule in registry}
    else:
        selected = set(enabled_rule_ids)
    return frozenset(selected - disabled)


def list_rule_info(
    registry: RuleRegistry,
    active_rule_ids: frozenset[str] | None = None,
) -> list[RuleInfo]:
    """Return metadata for every registered rule."""
    return [
        RuleInfo(
            rule_id=rule.rule_id,
            category=rule.category,
            weight=rule.weight,
            description=rule.description,
            enabled=active_rule_ids is None or rule.rule_id in active_rule_ids,
        )
        for rule in registry
    ]
