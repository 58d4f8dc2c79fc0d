"""Error taxonomy for rubric construction and evaluation runs."""

from __future__ import annotations


class RubricError(Exception):
    """Base class for all style-rubric failures."""


class DuplicateRuleError(RubricError, ValueError):
    """Raised when a rule id is registered twice."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule '{rule_id}' is already registered.")
        self.rule_id = rule_id


class InvalidWeightError(RubricError, ValueError):
    """Raised when rule weights cannot form a valid category average."""

    def __init__(self, message: str, *, category: str, weight: float) -> None:
        super().__init__(message)
        self.category = category
        self.weight = weight


class RegistryFrozenError(RubricError, RuntimeError):
    """Raised when registering into a registry that is already in use."""


class IncompleteEvaluationError(RubricError):
    """Raised when the aggregator does not receive every category."""

    def __init__(self, missing: list[str]) -> None:
        joined = ", ".join(missing)
        super().__init__(f"Evaluation is missing category scores for: {joined}")
        self.missing = tuple(missing)


class EvaluationTimeoutError(RubricError):
    """Raised when a full evaluation run exceeds its time budget."""


class ConfigError(RubricError, ValueError):
    """Raised for invalid configuration values."""
