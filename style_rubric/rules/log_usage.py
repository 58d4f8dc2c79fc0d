"""Logging rules."""

from __future__ import annotations

from dataclasses import dataclass

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import (
    EAGER_LOG_FORMAT,
    LOG_CALL,
    LOGGER_DEFINITION,
    PRINT_CALL,
    FactModel,
    SourceFact,
)
from style_rubric.rules.base import RatioRule, Rule, RuleResult, finding_for
from style_rubric.rules.predicates import is_false


@dataclass(frozen=True, slots=True)
class LoggerOverPrintRule:
    """Scores the share of diagnostic output routed through logging."""

    rule_id: str = "logging.logger_over_print"
    category: Category = Category.LOGGING
    weight: float = 0.5
    description: str = "Library code reports through logging rather than print()."

    def evaluate(self, facts: FactModel) -> RuleResult:
        log_calls = len(facts.of_kind(LOG_CALL))
        prints = [fact for fact in facts.of_kind(PRINT_CALL) if fact.value is True]
        total = log_calls + len(prints)
        if total == 0:
            return RuleResult.not_applicable()

        findings = tuple(
            finding_for(
                self,
                fact.location,
                f"print() call in {fact.subject or fact.location.file}.",
                "Replace print() diagnostics with a module logger.",
            )
            for fact in prints
        )
        return RuleResult(score=log_calls / total, findings=findings)


def _uses_module_name(fact: SourceFact) -> bool:
    return fact.label == "__name__"


def logging_rules(limits: RuleLimits) -> list[Rule]:
    _ = limits
    return [
        LoggerOverPrintRule(),
        RatioRule(
            rule_id="logging.module_loggers",
            category=Category.LOGGING,
            weight=0.25,
            description="Loggers are created with logging.getLogger(__name__).",
            fact_kind=LOGGER_DEFINITION,
            predicate=_uses_module_name,
            message="Logger in {file} is named '{value}' instead of __name__.",
            suggestion="Create module loggers with logging.getLogger(__name__).",
        ),
        RatioRule(
            rule_id="logging.lazy_formatting",
            category=Category.LOGGING,
            weight=0.25,
            description="Log calls pass arguments instead of pre-formatting messages.",
            fact_kind=EAGER_LOG_FORMAT,
            predicate=is_false,
            message="Log message pre-formatted in {subject}.",
            suggestion="Pass log arguments separately, e.g. logger.info('x=%s', x).",
        ),
    ]
