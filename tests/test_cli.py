"""CLI tests driven through typer's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from style_rubric import __version__
from style_rubric.cli import app
from style_rubric.facts import BARE_EXCEPT, DOCSTRING_PRESENT, FUNCTION_LENGTH, FactModel
from tests.helpers_facts import compliant_model, fact
from tests.helpers_git import write_file

runner = CliRunner()

CLEAN_MODULE = '''"""Greeting helpers."""

import logging

logger = logging.getLogger(__name__)


def greet(name: str) -> str:
    """Return a greeting for ``name``."""
    logger.debug("greeting %s", name)
    return f"Hello, {name}"
'''


def _write_facts(path: Path, model: FactModel) -> Path:
    path.write_text(json.dumps(model.to_dict()), encoding="utf-8")
    return path


def _weak_facts(tmp_path: Path) -> Path:
    model = FactModel.build(
        [
            fact(FUNCTION_LENGTH, 50, line=1, end_line=50, subject="process"),
            fact(DOCSTRING_PRESENT, False, line=1, end_line=50, subject="process"),
            fact(BARE_EXCEPT, True, line=30, end_line=31, subject="process"),
        ]
    )
    return _write_facts(tmp_path / "weak.json", model)


def test_root_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "Score a Python codebase" in result.stdout
    for command in ("score", "facts", "rules", "config-init", "config-validate"):
        assert command in result.stdout


def test_version_option() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_score_directory_prints_text_report(tmp_path: Path) -> None:
    write_file(tmp_path, "greetings.py", CLEAN_MODULE)

    result = runner.invoke(app, ["score", str(tmp_path), "--no-git"])

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("Overall Score: ")
    assert "Category Scores:\n- Layout & Formatting: " in result.stdout
    assert "Recommendations:" in result.stdout


def test_score_json_format(tmp_path: Path) -> None:
    write_file(tmp_path, "greetings.py", CLEAN_MODULE)

    result = runner.invoke(app, ["score", str(tmp_path), "--no-git", "--format", "json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert len(payload["categories"]) == 10
    assert payload["meta"]["source"] == f"path:{tmp_path}"
    assert payload["meta"]["generated_at"].endswith("Z")


def test_score_compliant_facts_file_is_perfect(tmp_path: Path) -> None:
    facts_path = _write_facts(tmp_path / "facts.json", compliant_model())

    result = runner.invoke(
        app, ["score", str(tmp_path), "--facts-file", str(facts_path), "--fail-under", "10"]
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("Overall Score: 10.0/10\n")
    assert "Key Weaknesses:\n- None" in result.stdout


def test_fail_under_exits_nonzero(tmp_path: Path) -> None:
    facts_path = _weak_facts(tmp_path)

    result = runner.invoke(
        app, ["score", str(tmp_path), "--facts-file", str(facts_path), "--fail-under", "9.5"]
    )

    assert result.exit_code == 1
    assert "Overall Score: 8.0/10" in result.stdout


def test_fail_under_from_config(tmp_path: Path) -> None:
    facts_path = _weak_facts(tmp_path)
    (tmp_path / ".style-rubric.toml").write_text("fail_under = 9.0\n", encoding="utf-8")

    result = runner.invoke(app, ["score", str(tmp_path), "--facts-file", str(facts_path)])
    assert result.exit_code == 1


def test_max_recommendations_zero_prints_none(tmp_path: Path) -> None:
    facts_path = _weak_facts(tmp_path)

    result = runner.invoke(
        app,
        [
            "score",
            str(tmp_path),
            "--facts-file",
            str(facts_path),
            "--max-recommendations",
            "0",
        ],
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.rstrip().endswith("Recommendations:\n- None")


def test_invalid_format_is_bad_parameter(tmp_path: Path) -> None:
    result = runner.invoke(app, ["score", str(tmp_path), "--format", "yaml"])

    assert result.exit_code == 2
    assert "format must be one of" in result.output


def test_unknown_rule_in_config_is_bad_parameter(tmp_path: Path) -> None:
    (tmp_path / ".style-rubric.toml").write_text(
        '[rules]\ndisable = ["layout.tabs"]\n', encoding="utf-8"
    )
    facts_path = _write_facts(tmp_path / "facts.json", compliant_model())

    result = runner.invoke(app, ["score", str(tmp_path), "--facts-file", str(facts_path)])

    assert result.exit_code == 2
    assert "Unknown rule ids: layout.tabs" in result.output


def test_invalid_facts_file_is_bad_parameter(tmp_path: Path) -> None:
    facts_path = tmp_path / "facts.json"
    facts_path.write_text('{"facts": 3}', encoding="utf-8")

    result = runner.invoke(app, ["score", str(tmp_path), "--facts-file", str(facts_path)])

    assert result.exit_code == 2
    assert "'facts' list" in result.output


def test_facts_command_prints_json(tmp_path: Path) -> None:
    write_file(tmp_path, "greetings.py", CLEAN_MODULE)

    result = runner.invoke(app, ["facts", str(tmp_path), "--no-git"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert "greetings.py" in payload["files"]
    assert {item["kind"] for item in payload["facts"]} >= {"function_name", "log_call"}


def test_rules_command_text_and_json(tmp_path: Path) -> None:
    (tmp_path / ".style-rubric.toml").write_text(
        '[rules]\ndisable = ["naming.descriptive_arguments"]\n', encoding="utf-8"
    )

    text = runner.invoke(app, ["rules", "--repo", str(tmp_path)])
    as_json = runner.invoke(app, ["rules", "--repo", str(tmp_path), "--format", "json"])

    assert text.exit_code == 0
    assert "- layout.line_length (Layout & Formatting, weight 0.4) [enabled]" in text.stdout
    assert "naming.descriptive_arguments (Naming, weight 0.1) [disabled]" in text.stdout
    rules = {item["rule_id"]: item for item in json.loads(as_json.stdout)["rules"]}
    assert rules["naming.descriptive_arguments"]["enabled"] is False
    assert rules["testing.tests_present"]["category"] == "testing"


def test_config_command_json(tmp_path: Path) -> None:
    (tmp_path / ".style-rubric.toml").write_text(
        "[weights]\ntesting = 0.2\nperformance = 0.0\n", encoding="utf-8"
    )

    result = runner.invoke(app, ["config", "--repo", str(tmp_path), "--format", "json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["weights"]["testing"] == 0.2
    assert "layout.line_length" in payload["active_rule_ids"]


def test_config_init_and_validate(tmp_path: Path) -> None:
    out_path = tmp_path / ".style-rubric.toml"

    created = runner.invoke(app, ["config-init", "--out", str(out_path)])
    refused = runner.invoke(app, ["config-init", "--out", str(out_path)])
    forced = runner.invoke(app, ["config-init", "--out", str(out_path), "--force"])
    validated = runner.invoke(
        app, ["config-validate", "--repo", str(tmp_path), "--format", "json"]
    )

    assert created.exit_code == 0
    assert out_path.exists()
    assert refused.exit_code == 2
    assert "Refusing to overwrite" in refused.output
    assert forced.exit_code == 0
    assert validated.exit_code == 0, validated.output
    assert json.loads(validated.stdout)["ok"] is True


def test_config_validate_reports_errors(tmp_path: Path) -> None:
    (tmp_path / ".style-rubric.toml").write_text("[weights]\ntesting = 0.9\n", encoding="utf-8")

    result = runner.invoke(app, ["config-validate", "--repo", str(tmp_path)])

    assert result.exit_code == 2
    assert "must sum to 1.0" in result.output
