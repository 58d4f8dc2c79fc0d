"""Output rendering."""

from __future__ import annotations

import json
from typing import Any

import click

from style_rubric import __version__
from style_rubric.aggregate import EvaluationReport, Recommendation
from style_rubric.rules.base import Finding
from style_rubric.scoring import CategoryScore


class ReportBuilder:
    """Render an ``EvaluationReport`` as the structured text report.

    Rendering is a pure transform; with ``color`` off, identical reports give
    byte-identical text.
    """

    def __init__(self, *, color: bool = False) -> None:
        self._color = color

    def build(self, report: EvaluationReport) -> str:
        lines: list[str] = [self._overall_line(report.overall_score), ""]

        lines.append(self._heading("Category Scores:"))
        for item in report.category_scores:
            lines.append(_score_line(item))
        lines.append("")

        lines.append(self._heading("Top Strengths:"))
        lines.extend(_score_line(item) for item in report.strengths)
        if not report.strengths:
            lines.append("- None")
        lines.append("")

        lines.append(self._heading("Key Weaknesses:"))
        lines.extend(_score_line(item) for item in report.weaknesses)
        if not report.weaknesses:
            lines.append("- None")
        lines.append("")

        lines.append(self._heading("Recommendations:"))
        for index, recommendation in enumerate(report.recommendations, start=1):
            lines.append(f"{index}. {_recommendation_line(recommendation)}")
        if not report.recommendations:
            lines.append("- None")
        return "\n".join(lines)

    def _overall_line(self, score: float) -> str:
        text = f"Overall Score: {score:.1f}/10"
        if not self._color:
            return text
        return click.style(text, fg=_score_color(score), bold=True)

    def _heading(self, text: str) -> str:
        return click.style(text, bold=True) if self._color else text


def render_report(report: EvaluationReport, *, color: bool = False) -> str:
    """Render the structured text report."""
    return ReportBuilder(color=color).build(report)


def render_json(
    report: EvaluationReport, *, source: str, generated_at: str | None = None
) -> str:
    """Render stable JSON output for CI and automation."""
    payload = build_json_payload(report, source=source, generated_at=generated_at)
    return json.dumps(payload, sort_keys=True)


def build_json_payload(
    report: EvaluationReport, *, source: str, generated_at: str | None = None
) -> dict[str, Any]:
    """Build stable JSON payload for CI and automation.

    ``meta.generated_at`` is only set when the caller passes a timestamp, so
    the same report always yields the same payload.
    """
    meta: dict[str, Any] = {"source": source, "version": __version__}
    if generated_at is not None:
        meta["generated_at"] = generated_at
    return {
        "overall_score": report.overall_score,
        "categories": [_serialize_category(item) for item in report.category_scores],
        "strengths": [item.category.value for item in report.strengths],
        "weaknesses": [item.category.value for item in report.weaknesses],
        "recommendations": [_serialize_recommendation(item) for item in report.recommendations],
        "meta": meta,
    }


def _serialize_category(item: CategoryScore) -> dict[str, Any]:
    return {
        "category": item.category.value,
        "name": item.category.label,
        "score": item.score,
        "vacuous": item.vacuous,
        "rules": [
            {
                "rule_id": outcome.rule_id,
                "weight": outcome.weight,
                "score": outcome.score,
                "applicable": outcome.applicable,
                "failed": outcome.failed,
            }
            for outcome in item.rule_outcomes
        ],
        "findings": [_serialize_finding(finding) for finding in item.findings],
    }


def _serialize_finding(finding: Finding) -> dict[str, Any]:
    return {
        "rule_id": finding.rule_id,
        "kind": finding.kind,
        "message": finding.message,
        "location": {
            "file": finding.location.file,
            "start_line": finding.location.start_line,
            "end_line": finding.location.end_line,
        },
        "suggestion": finding.suggestion,
    }


def _serialize_recommendation(item: Recommendation) -> dict[str, Any]:
    return {
        "category": item.category.value,
        "kind": item.kind,
        "text": item.text,
        "occurrences": item.occurrences,
    }


def _score_line(item: CategoryScore) -> str:
    return f"- {item.category.label}: {item.score:.1f}/10"


def _recommendation_line(item: Recommendation) -> str:
    return f"[{item.category.label}] {item.text}"


def _score_color(score: float) -> str:
    if score >= 8.0:
        return "green"
    if score >= 6.0:
        return "yellow"
    return "red"
