"""Configuration loading for style-rubric."""

from __future__ import annotations

import math
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from style_rubric.categories import ALL_CATEGORIES, DEFAULT_CATEGORY_WEIGHT, Category
from style_rubric.errors import ConfigError

CONFIG_FILENAMES = (".style-rubric.toml", "style-rubric.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("style_rubric", "style-rubric")
OUTPUT_FORMATS = {"text", "json"}
WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True, slots=True)
class RuleLimits:
    """Numeric thresholds the built-in rules measure against."""

    max_line_length: int = 100
    max_function_length: int = 40
    max_arguments: int = 5
    max_complexity: int = 10
    max_loop_depth: int = 3
    max_class_methods: int = 20
    max_class_bases: int = 2
    max_module_length: int = 500
    min_commit_subject: int = 10
    max_commit_subject: int = 72

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass(slots=True)
class ReportConfig:
    """Report shaping thresholds."""

    max_recommendations: int = 5
    strength_threshold: float = 9.0
    weakness_threshold: float = 6.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_recommendations": self.max_recommendations,
            "strength_threshold": self.strength_threshold,
            "weakness_threshold": self.weakness_threshold,
        }


@dataclass(slots=True)
class EvaluationConfig:
    """Concurrency and time-budget controls for a run."""

    max_workers: int | None = None
    budget_seconds: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"max_workers": self.max_workers, "budget_seconds": self.budget_seconds}


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "text"
    fail_under: float | None = None
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    category_weights: dict[Category, float] = field(default_factory=dict)
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    report: ReportConfig = field(default_factory=ReportConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    limits: RuleLimits = field(default_factory=RuleLimits)
    source: str | None = None

    def resolved_weights(self) -> dict[Category, float]:
        """Return weights for all ten categories with overrides applied."""
        return resolve_category_weights(self.category_weights)

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fail_under": self.fail_under,
            "include": list(self.include),
            "exclude": list(self.exclude),
            "weights": {
                category.value: weight for category, weight in self.resolved_weights().items()
            },
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "report": self.report.to_dict(),
            "evaluation": self.evaluation.to_dict(),
            "limits": self.limits.to_dict(),
            "source": self.source,
        }


def resolve_category_weights(overrides: dict[Category, float] | None) -> dict[Category, float]:
    """Apply overrides to the equal default weights and validate the total."""
    weights = {category: DEFAULT_CATEGORY_WEIGHT for category in ALL_CATEGORIES}
    for category, weight in (overrides or {}).items():
        if not math.isfinite(weight):
            raise ConfigError(
                f"Category weight for '{category.value}' must be a finite number, got {weight}."
            )
        if weight < 0:
            raise ConfigError(
                f"Category weight for '{category.value}' must be non-negative, got {weight}."
            )
        weights[category] = weight

    total = sum(weights.values())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        detail = ", ".join(f"{category.value}={weight:g}" for category, weight in weights.items())
        raise ConfigError(f"Category weights must sum to 1.0, got {total:.6f} ({detail}).")
    return weights


def load_app_config(repo: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or repository-local files with precedence."""
    repo = repo.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (repo / config_path)
        if not resolved.exists():
            raise ConfigError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = repo / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = repo / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template users can customize."""
    return "\n".join(
        [
            'format = "text"',
            "fail_under = 7.0",
            "include = []",
            'exclude = ["build/**", "docs/**"]',
            "",
            "[weights]",
            "# Overrides must keep the ten category weights summing to 1.0.",
            "# testing = 0.15",
            "# version_control = 0.05",
            "",
            "[rules]",
            "# enable = []",
            "disable = []",
            "",
            "[report]",
            "max_recommendations = 5",
            "strength_threshold = 9.0",
            "weakness_threshold = 6.0",
            "",
            "[evaluation]",
            "max_workers = 4",
            "# budget_seconds = 30",
            "",
            "[limits]",
            "max_line_length = 100",
            "max_function_length = 40",
            "max_arguments = 5",
            "max_complexity = 10",
            "max_loop_depth = 3",
            "max_class_methods = 20",
            "max_class_bases = 2",
            "max_module_length = 500",
            "min_commit_subject = 10",
            "max_commit_subject = 72",
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    weights_mapping = _as_table(mapping.get("weights"), "weights")
    report_mapping = _as_table(mapping.get("report"), "report")
    evaluation_mapping = _as_table(mapping.get("evaluation"), "evaluation")
    limits_mapping = _as_table(mapping.get("limits"), "limits")

    format_value = _as_choice(mapping.get("format", "text"), OUTPUT_FORMATS, "format")

    raw_fail = mapping.get("fail_under")
    fail_value = None if raw_fail is None else _as_float(raw_fail, "fail_under")
    if fail_value is not None and not 0.0 <= fail_value <= 10.0:
        raise ConfigError("fail_under must be between 0 and 10")

    category_weights = _parse_category_weights(weights_mapping)
    resolve_category_weights(category_weights)

    return AppConfig(
        format=format_value,
        fail_under=fail_value,
        include=_as_str_list(mapping.get("include"), "include"),
        exclude=_as_str_list(mapping.get("exclude"), "exclude"),
        category_weights=category_weights,
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable"), "rules.enable"),
        rule_disable=_as_str_list(rules_mapping.get("disable"), "rules.disable"),
        report=_parse_report_config(report_mapping),
        evaluation=_parse_evaluation_config(evaluation_mapping),
        limits=_parse_limits(limits_mapping),
        source=source,
    )


def _parse_category_weights(value: dict[str, Any]) -> dict[Category, float]:
    parsed: dict[Category, float] = {}
    for key, raw in value.items():
        try:
            category = Category.from_slug(key)
        except ValueError as exc:
            raise ConfigError(f"weights: {exc}") from exc
        parsed[category] = _as_float(raw, f"weights.{key}")
    return parsed


def _parse_report_config(value: dict[str, Any]) -> ReportConfig:
    max_recommendations = _as_int(
        value.get("max_recommendations", 5), "report.max_recommendations"
    )
    if max_recommendations < 0:
        raise ConfigError("report.max_recommendations must be >= 0")
    strength = _as_float(value.get("strength_threshold", 9.0), "report.strength_threshold")
    weakness = _as_float(value.get("weakness_threshold", 6.0), "report.weakness_threshold")
    if not 0.0 <= weakness < strength <= 10.0:
        raise ConfigError(
            "report thresholds must satisfy 0 <= weakness_threshold < strength_threshold <= 10"
        )
    return ReportConfig(
        max_recommendations=max_recommendations,
        strength_threshold=strength,
        weakness_threshold=weakness,
    )


def _parse_evaluation_config(value: dict[str, Any]) -> EvaluationConfig:
    raw_workers = value.get("max_workers")
    workers = None if raw_workers is None else _as_int(raw_workers, "evaluation.max_workers")
    if workers is not None and workers <= 0:
        raise ConfigError("evaluation.max_workers must be > 0")

    raw_budget = value.get("budget_seconds")
    budget = None if raw_budget is None else _as_float(raw_budget, "evaluation.budget_seconds")
    if budget is not None and budget <= 0:
        raise ConfigError("evaluation.budget_seconds must be > 0")
    return EvaluationConfig(max_workers=workers, budget_seconds=budget)


def _parse_limits(value: dict[str, Any]) -> RuleLimits:
    known = RuleLimits.__dataclass_fields__
    unknown = sorted(key for key in value if key not in known)
    if unknown:
        raise ConfigError(f"Unknown limits: {', '.join(unknown)}")

    parsed: dict[str, int] = {}
    for key, raw in value.items():
        number = _as_int(raw, f"limits.{key}")
        if number <= 0:
            raise ConfigError(f"limits.{key} must be > 0")
        parsed[key] = number
    limits = RuleLimits(**parsed)
    if limits.min_commit_subject > limits.max_commit_subject:
        raise ConfigError("limits.min_commit_subject must not exceed limits.max_commit_subject")
    return limits


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{field_name} must be a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any, field_name: str) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value, field_name)


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ConfigError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigError(f"{field_name} must be an integer")
    return raw


def _as_float(raw: Any, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{field_name} must be a number")
    value = float(raw)
    if not math.isfinite(value):
        raise ConfigError(f"{field_name} must be a finite number, got {value}")
    return value
