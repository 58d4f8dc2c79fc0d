"""End-to-end evaluation run: config and registry in, report out."""

from __future__ import annotations

import logging

from style_rubric.aggregate import EvaluationReport, aggregate
from style_rubric.config import AppConfig, RuleLimits
from style_rubric.facts import FactModel
from style_rubric.rules import (
    RuleRegistry,
    build_registry,
    default_registry,
    resolve_active_rule_ids,
)
from style_rubric.scoring import evaluate_all

logger = logging.getLogger(__name__)


def registry_for(limits: RuleLimits) -> RuleRegistry:
    """Reuse the process-wide registry unless custom limits require a new one."""
    if limits == RuleLimits():
        return default_registry()
    return build_registry(limits)


def run_evaluation(
    fact_model: FactModel,
    config: AppConfig | None = None,
    registry: RuleRegistry | None = None,
) -> EvaluationReport:
    """Evaluate a fact model under a configuration.

    Configuration problems surface before any rule runs.
    """
    app_config = config or AppConfig()
    active_registry = registry if registry is not None else registry_for(app_config.limits)
    weights = app_config.resolved_weights()
    active_rule_ids = resolve_active_rule_ids(
        active_registry,
        enabled_rule_ids=app_config.rule_enable,
        disabled_rule_ids=app_config.rule_disable,
    )
    logger.debug(
        "Evaluating %d facts with %d/%d active rules",
        len(fact_model.facts),
        len(active_rule_ids),
        len(active_registry),
    )

    category_scores = evaluate_all(
        fact_model,
        active_registry,
        active_rule_ids=active_rule_ids,
        max_workers=app_config.evaluation.max_workers,
        budget_seconds=app_config.evaluation.budget_seconds,
    )
    return aggregate(
        category_scores,
        weights=weights,
        strength_threshold=app_config.report.strength_threshold,
        weakness_threshold=app_config.report.weakness_threshold,
        max_recommendations=app_config.report.max_recommendations,
    )
