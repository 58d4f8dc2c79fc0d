"""Configuration and modularity rules."""

from __future__ import annotations

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import GLOBAL_STATEMENT, HARDCODED_SECRET, MODULE_LENGTH
from style_rubric.rules.base import PenaltyRule, RatioRule, Rule
from style_rubric.rules.predicates import at_most


def configuration_rules(limits: RuleLimits) -> list[Rule]:
    return [
        PenaltyRule(
            rule_id="configuration.hardcoded_secrets",
            category=Category.CONFIGURATION,
            weight=0.4,
            description="Credentials come from configuration, not string literals.",
            fact_kind=HARDCODED_SECRET,
            penalty=0.5,
            message="'{subject}' is assigned a hardcoded credential.",
            suggestion="Load secrets from environment variables or a config file.",
        ),
        PenaltyRule(
            rule_id="configuration.global_state",
            category=Category.CONFIGURATION,
            weight=0.2,
            description="Functions avoid mutating module globals.",
            fact_kind=GLOBAL_STATEMENT,
            penalty=0.2,
            message="'global {subject}' mutates module state.",
            suggestion="Pass state explicitly instead of using global statements.",
        ),
        RatioRule(
            rule_id="configuration.module_size",
            category=Category.CONFIGURATION,
            weight=0.4,
            description=f"Modules stay within {limits.max_module_length} lines.",
            fact_kind=MODULE_LENGTH,
            predicate=at_most(limits.max_module_length),
            message="Module {file} is {value} lines long.",
            suggestion=(
                f"Split modules longer than {limits.max_module_length} lines "
                "into focused submodules."
            ),
        ),
    ]
