"""CLI entrypoint for style-rubric."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import typer

from style_rubric import __version__
from style_rubric.aggregate import EvaluationReport
from style_rubric.config import AppConfig, default_config_template, load_app_config
from style_rubric.errors import EvaluationTimeoutError, IncompleteEvaluationError
from style_rubric.extract import extract_facts
from style_rubric.facts import FactModel, load_fact_model
from style_rubric.output import render_json, render_report
from style_rubric.pipeline import registry_for, run_evaluation
from style_rubric.rules import list_rule_info, resolve_active_rule_ids

app = typer.Typer(
    name="style-rubric",
    no_args_is_help=True,
    help="Score a Python codebase against a style and architecture rubric.",
)

OUTPUT_FORMATS = {"text", "json"}


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug output to stderr.")
    ] = False,
) -> None:
    """Root command callback."""
    _ = version
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("score")
def score_command(
    path: Annotated[Path, typer.Argument(help="Codebase root to evaluate.")] = Path("."),
    facts_file: Annotated[
        Path | None,
        typer.Option("--facts-file", help="Evaluate a pre-extracted facts JSON document."),
    ] = None,
    format: Annotated[
        str | None, typer.Option(help="Output format: text|json.", show_default="text")
    ] = None,
    fail_under: Annotated[
        float | None, typer.Option(help="Exit nonzero if overall score is below this value.")
    ] = None,
    max_recommendations: Annotated[
        int | None, typer.Option(help="Maximum recommendations per category.")
    ] = None,
    include: Annotated[list[str] | None, typer.Option(help="Include glob pattern.")] = None,
    exclude: Annotated[list[str] | None, typer.Option(help="Exclude glob pattern.")] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    no_git: Annotated[
        bool, typer.Option("--no-git", help="Skip commit and tracked-file facts.")
    ] = False,
) -> None:
    """Evaluate a codebase and print the rubric report."""
    app_config = _load_config_or_raise(path, config_file)
    output_format = _format_or_raise(format or app_config.format)

    if max_recommendations is not None:
        if max_recommendations < 0:
            raise typer.BadParameter("must be >= 0", param_hint="--max-recommendations")
        app_config.report = replace(app_config.report, max_recommendations=max_recommendations)

    fact_model, source = _collect_facts(
        path=path,
        facts_file=facts_file,
        include=include if include is not None else app_config.include,
        exclude=exclude if exclude is not None else app_config.exclude,
        with_git=not no_git,
    )
    report = _evaluate_or_raise(fact_model, app_config)

    if output_format == "json":
        typer.echo(render_json(report, source=source, generated_at=_utc_timestamp()))
    else:
        typer.echo(render_report(report))

    fail_threshold = fail_under if fail_under is not None else app_config.fail_under
    if fail_threshold is not None and report.overall_score < fail_threshold:
        raise typer.Exit(code=1)


@app.command("facts")
def facts_command(
    path: Annotated[Path, typer.Argument(help="Codebase root to inspect.")] = Path("."),
    include: Annotated[list[str] | None, typer.Option(help="Include glob pattern.")] = None,
    exclude: Annotated[list[str] | None, typer.Option(help="Exclude glob pattern.")] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    no_git: Annotated[
        bool, typer.Option("--no-git", help="Skip commit and tracked-file facts.")
    ] = False,
) -> None:
    """Print the extracted facts as a JSON document."""
    app_config = _load_config_or_raise(path, config_file)
    fact_model, _ = _collect_facts(
        path=path,
        facts_file=None,
        include=include if include is not None else app_config.include,
        exclude=exclude if exclude is not None else app_config.exclude,
        with_git=not no_git,
    )
    typer.echo(json.dumps(fact_model.to_dict(), sort_keys=True))


@app.command("rules")
def rules_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: text|json.")] = "text",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List the rubric rules with their category, weight and status."""
    output_format = _format_or_raise(format)
    app_config = _load_config_or_raise(repo, config_file)
    registry = registry_for(app_config.limits)
    active_ids = _active_rule_ids_or_raise(app_config)
    rule_info = list_rule_info(registry, active_ids)

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "category": item.category.value,
                    "weight": item.weight,
                    "description": item.description,
                    "enabled": item.enabled,
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.enabled else "disabled"
        lines.append(
            f"- {item.rule_id} ({item.category.label}, weight {item.weight:g}) "
            f"[{status}] - {item.description}"
        )
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: text|json.")] = "text",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = _format_or_raise(format)
    app_config = _load_config_or_raise(repo, config_file)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = sorted(_active_rule_ids_or_raise(app_config))

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- fail_under: {payload['fail_under']}",
        f"- include: {payload['include']}",
        f"- exclude: {payload['exclude']}",
        f"- weights: {payload['weights']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- report: {payload['report']}",
        f"- evaluation: {payload['evaluation']}",
        f"- limits: {payload['limits']}",
        f"- active_rule_ids: {payload['active_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".style-rubric.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter repository config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


@app.command("config-validate")
def config_validate_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Path to config TOML file to validate."),
    ] = Path(".style-rubric.toml"),
    format: Annotated[str, typer.Option(help="Output format: text|json.")] = "text",
) -> None:
    """Validate a config file and report active rules."""
    output_format = _format_or_raise(format)
    app_config = _load_config_or_raise(repo, config_file)
    payload = {
        "ok": True,
        "source": app_config.source,
        "active_rule_ids": sorted(_active_rule_ids_or_raise(app_config)),
    }
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Config is valid.",
                f"- source: {payload['source']}",
                f"- active_rule_ids: {payload['active_rule_ids']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint."""
    app()


def _utc_timestamp() -> str:
    return datetime.now(tz=UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _format_or_raise(value: str) -> str:
    output_format = value.lower()
    if output_format not in OUTPUT_FORMATS:
        raise typer.BadParameter("format must be one of: json, text", param_hint="--format")
    return output_format


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _active_rule_ids_or_raise(app_config: AppConfig) -> frozenset[str]:
    try:
        return resolve_active_rule_ids(
            registry_for(app_config.limits),
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc


def _collect_facts(
    *,
    path: Path,
    facts_file: Path | None,
    include: list[str],
    exclude: list[str],
    with_git: bool,
) -> tuple[FactModel, str]:
    try:
        if facts_file is not None:
            return (load_fact_model(facts_file), f"facts_file:{facts_file}")
        return (
            extract_facts(path, include=include, exclude=exclude, with_git=with_git),
            f"path:{path}",
        )
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def _evaluate_or_raise(fact_model: FactModel, app_config: AppConfig) -> EvaluationReport:
    try:
        return run_evaluation(fact_model, app_config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc
    except (IncompleteEvaluationError, EvaluationTimeoutError) as exc:
        raise typer.BadParameter(str(exc)) from exc
