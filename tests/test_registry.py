"""Tests for the rule registry and rule selection."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from style_rubric.categories import ALL_CATEGORIES, Category
from style_rubric.config import RuleLimits
from style_rubric.errors import (
    ConfigError,
    DuplicateRuleError,
    InvalidWeightError,
    RegistryFrozenError,
)
from style_rubric.facts import FactModel
from style_rubric.rules import (
    RuleRegistry,
    build_registry,
    default_registry,
    list_rule_info,
    resolve_active_rule_ids,
)
from style_rubric.rules.base import RuleResult


@dataclass(frozen=True, slots=True)
class _StaticRule:
    rule_id: str
    category: Category
    weight: float
    score: float = 1.0
    description: str = "static test rule"

    def evaluate(self, facts: FactModel) -> RuleResult:
        _ = facts
        return RuleResult(score=self.score)


def test_default_registry_covers_every_category_with_complete_weights() -> None:
    registry = default_registry()

    assert registry.frozen
    assert registry.categories() == ALL_CATEGORIES
    for category in ALL_CATEGORIES:
        assert registry.category_weight(category) == pytest.approx(1.0)


def test_default_registry_is_shared() -> None:
    assert default_registry() is default_registry()


def test_rules_for_keeps_registration_order() -> None:
    registry = RuleRegistry()
    registry.register(_StaticRule("naming.b", Category.NAMING, 0.5))
    registry.register(_StaticRule("naming.a", Category.NAMING, 0.5))

    assert [rule.rule_id for rule in registry.rules_for(Category.NAMING)] == [
        "naming.b",
        "naming.a",
    ]
    assert registry.rules_for(Category.TESTING) == ()


def test_naming_weights_over_one_rejected_at_registration() -> None:
    registry = RuleRegistry()
    registry.register(_StaticRule("naming.first", Category.NAMING, 0.6))

    with pytest.raises(InvalidWeightError) as excinfo:
        registry.register(_StaticRule("naming.second", Category.NAMING, 0.6))

    assert excinfo.value.category == "naming"
    assert excinfo.value.weight == pytest.approx(1.2)
    assert "naming.second" not in registry


def test_weight_outside_unit_interval_rejected() -> None:
    registry = RuleRegistry()
    with pytest.raises(InvalidWeightError):
        registry.register(_StaticRule("layout.zero", Category.LAYOUT, 0.0))


def test_duplicate_rule_id_rejected() -> None:
    registry = RuleRegistry()
    registry.register(_StaticRule("layout.only", Category.LAYOUT, 0.5))

    with pytest.raises(DuplicateRuleError, match="layout.only"):
        registry.register(_StaticRule("layout.only", Category.LAYOUT, 0.5))


def test_freeze_requires_complete_category_weights() -> None:
    registry = RuleRegistry()
    registry.register(_StaticRule("layout.half", Category.LAYOUT, 0.5))

    with pytest.raises(InvalidWeightError, match="sum to 0.500000"):
        registry.freeze()
    assert not registry.frozen


def test_register_after_freeze_raises() -> None:
    registry = RuleRegistry()
    registry.register(_StaticRule("layout.all", Category.LAYOUT, 1.0))
    registry.freeze()

    with pytest.raises(RegistryFrozenError):
        registry.register(_StaticRule("layout.late", Category.LAYOUT, 0.1))


def test_get_unknown_rule_raises_key_error() -> None:
    with pytest.raises(KeyError, match="no.such_rule"):
        default_registry().get("no.such_rule")


def test_build_registry_applies_custom_limits() -> None:
    registry = build_registry(RuleLimits(max_function_length=25))
    assert "25 lines" in registry.get("function_design.length").description


def test_resolve_active_rule_ids_disables_rules() -> None:
    registry = default_registry()
    active = resolve_active_rule_ids(
        registry, disabled_rule_ids=["naming.descriptive_arguments"]
    )

    assert "naming.descriptive_arguments" not in active
    assert "naming.function_names" in active
    assert len(active) == len(registry) - 1


def test_resolve_active_rule_ids_allow_list() -> None:
    active = resolve_active_rule_ids(
        default_registry(),
        enabled_rule_ids=["layout.line_length", "testing.tests_present"],
    )
    assert active == frozenset({"layout.line_length", "testing.tests_present"})


def test_resolve_active_rule_ids_rejects_unknown_ids() -> None:
    with pytest.raises(ConfigError, match="Unknown rule ids: layout.tabs"):
        resolve_active_rule_ids(default_registry(), disabled_rule_ids=["layout.tabs"])


def test_list_rule_info_marks_disabled_rules() -> None:
    registry = default_registry()
    active = resolve_active_rule_ids(registry, disabled_rule_ids=["layout.wildcard_imports"])
    info = {item.rule_id: item for item in list_rule_info(registry, active)}

    assert not info["layout.wildcard_imports"].enabled
    assert info["layout.line_length"].enabled
    assert info["layout.line_length"].category is Category.LAYOUT
    assert list(info)[0] == "layout.line_length"
