"""Base rule protocol, finding model and shared rule variants."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from style_rubric.categories import Category
from style_rubric.facts import MODULE_LENGTH, FactModel, Location, SourceFact

RULE_ERROR = "rule_error"
VACUOUS = "vacuous"

FactPredicate = Callable[[SourceFact], bool]


@dataclass(frozen=True, slots=True)
class Finding:
    """A located explanation attached to a less-than-perfect result."""

    rule_id: str
    kind: str
    message: str
    location: Location
    suggestion: str = ""


@dataclass(frozen=True, slots=True)
class RuleResult:
    """Outcome of one rule over one FactModel."""

    score: float
    findings: tuple[Finding, ...] = ()
    applicable: bool = True

    @classmethod
    def not_applicable(cls) -> RuleResult:
        return cls(score=1.0, applicable=False)


class Rule(Protocol):
    """Protocol for deterministic, stateless rubric rules."""

    rule_id: str
    category: Category
    weight: float
    description: str

    def evaluate(self, facts: FactModel) -> RuleResult:
        """Evaluate the fact model and return a scored result."""


@dataclass(frozen=True, slots=True)
class RatioRule:
    """Scores the share of facts of one kind that satisfy a predicate.

    ``message`` is formatted per violating fact with ``subject``, ``value``
    and ``file`` placeholders. Facts rejected by ``selector`` are ignored; a
    model with no selected facts leaves the rule not applicable.
    """

    rule_id: str
    category: Category
    weight: float
    description: str
    fact_kind: str
    predicate: FactPredicate
    message: str
    suggestion: str
    selector: FactPredicate | None = None

    def evaluate(self, facts: FactModel) -> RuleResult:
        candidates = [
            fact
            for fact in facts.of_kind(self.fact_kind)
            if self.selector is None or self.selector(fact)
        ]
        if not candidates:
            return RuleResult.not_applicable()

        findings = tuple(
            _violation(self, fact, self.message, self.suggestion)
            for fact in candidates
            if not self.predicate(fact)
        )
        compliant = len(candidates) - len(findings)
        return RuleResult(score=compliant / len(candidates), findings=findings)


@dataclass(frozen=True, slots=True)
class PenaltyRule:
    """Deducts a fixed penalty for every fact flagged as a violation.

    Applies to any codebase that has modules, so a clean codebase with no
    flagged facts scores 1.0 rather than dropping out of its category.
    """

    rule_id: str
    category: Category
    weight: float
    description: str
    fact_kind: str
    message: str
    suggestion: str
    penalty: float = 0.25
    applies_to: str = MODULE_LENGTH

    def evaluate(self, facts: FactModel) -> RuleResult:
        if not facts.of_kind(self.applies_to) and not facts.of_kind(self.fact_kind):
            return RuleResult.not_applicable()

        violations = [fact for fact in facts.of_kind(self.fact_kind) if fact.value is True]
        findings = tuple(
            _violation(self, fact, self.message, self.suggestion) for fact in violations
        )
        return RuleResult(score=max(0.0, 1.0 - self.penalty * len(violations)), findings=findings)


@dataclass(frozen=True, slots=True)
class PresenceRule:
    """Requires at least one fact of a kind with a true value."""

    rule_id: str
    category: Category
    weight: float
    description: str
    fact_kind: str
    message: str
    suggestion: str

    def evaluate(self, facts: FactModel) -> RuleResult:
        observed = facts.of_kind(self.fact_kind)
        if not observed:
            return RuleResult.not_applicable()
        if any(fact.value is True for fact in observed):
            return RuleResult(score=1.0)
        return RuleResult(
            score=0.0,
            findings=(_violation(self, observed[0], self.message, self.suggestion),),
        )


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    category: Category
    weight: float
    description: str
    enabled: bool = True


def _violation(rule: Rule, fact: SourceFact, template: str, suggestion: str) -> Finding:
    return Finding(
        rule_id=rule.rule_id,
        kind=rule.rule_id,
        message=template.format(
            subject=fact.subject or fact.location.file,
            value=fact.value,
            file=fact.location.file,
        ),
        location=fact.location,
        suggestion=suggestion,
    )


def finding_for(rule: Rule, location: Location, message: str, suggestion: str) -> Finding:
    """Build a finding for bespoke rules that do not map one fact to one finding."""
    return Finding(
        rule_id=rule.rule_id,
        kind=rule.rule_id,
        message=message,
        location=location,
        suggestion=suggestion,
    )
