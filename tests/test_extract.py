"""Tests for the reference AST fact extractor."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from style_rubric.extract import extract_facts, is_artifact_path, is_test_path
from style_rubric.facts import (
    ARGUMENT_NAME,
    BARE_EXCEPT,
    BROAD_EXCEPT,
    CLASS_BASES,
    CLASS_DOCSTRING_PRESENT,
    CLASS_METHOD_COUNT,
    COMMIT_MESSAGE,
    DOCSTRING_PRESENT,
    EAGER_LOG_FORMAT,
    FUNCTION_ARGS,
    FUNCTION_COMPLEXITY,
    FUNCTION_LENGTH,
    FUNCTION_NAME,
    GITIGNORE_PRESENT,
    GLOBAL_STATEMENT,
    HARDCODED_SECRET,
    IMPORT_GROUP_ORDER,
    LINE_LENGTH,
    LOG_CALL,
    LOGGER_DEFINITION,
    LOOP_DEPTH,
    LOOP_STRING_CONCAT,
    MODULE_LENGTH,
    PRINT_CALL,
    RANGE_LEN_LOOP,
    SWALLOWED_EXCEPTION,
    TEST_ASSERTIONS,
    TEST_FILE,
    TEST_NAME,
    TRACKED_ARTIFACT,
    WILDCARD_IMPORT,
    FactModel,
    Location,
    SourceFact,
)
from tests.helpers_git import commit_all, init_repo, write_file

SERVICE_SOURCE = '''"""Service module."""

from __future__ import annotations

import logging
import os

import requests

from pkg import helpers

logger = logging.getLogger(__name__)
API_TOKEN = "s3cr3t-value"


class Service(Base, Mixin):
    """Talks to the backend."""

    def fetch(self, url, retries=3):
        """Fetch a URL."""
        for attempt in range(len(url)):
            for inner in url:
                if attempt and inner:
                    logger.info(f"retry {attempt}")
        return requests.get(url)

    def _reset(self):
        try:
            os.remove("cache")
        except:
            pass


def render(items):
    out = ""
    for item in items:
        out += "-"
    print(out)
    logger.warning("rendered %d items", len(items))
    return out


def counter():
    global COUNT
    try:
        return helpers.value()
    except (ValueError, Exception):
        logging.getLogger("app").error("failed")
        raise
'''

TEST_SOURCE = '''import pytest


def test_service_fetch_returns_response():
    assert True


def test_it():
    with pytest.raises(ValueError):
        int("x")


def test_nothing():
    print("debug")
'''


def _facts_of(model: FactModel, kind: str, subject: str | None = None) -> list[SourceFact]:
    return [
        fact for fact in model.of_kind(kind) if subject is None or fact.subject == subject
    ]


def _values_for(model: FactModel, subject: str) -> dict[str, object]:
    return {fact.kind: fact.value for fact in model.facts if fact.subject == subject}


@pytest.fixture
def sample_model(tmp_path: Path) -> FactModel:
    write_file(tmp_path, "pkg/__init__.py", "")
    write_file(tmp_path, "pkg/helpers.py", "def value():\n    return 1\n")
    write_file(tmp_path, "pkg/service.py", SERVICE_SOURCE)
    write_file(tmp_path, "tests/test_service.py", TEST_SOURCE)
    write_file(tmp_path, ".venv/lib/site.py", "import os\n")
    write_file(tmp_path, "build/lib/pkg/service.py", "x = 1\n")
    return extract_facts(tmp_path, with_git=False)


def test_walks_python_files_and_skips_tool_directories(sample_model: FactModel) -> None:
    files = {fact.location.file for fact in sample_model.of_kind(MODULE_LENGTH)}
    assert files == {
        "pkg/__init__.py",
        "pkg/helpers.py",
        "pkg/service.py",
        "tests/test_service.py",
    }


def test_file_level_facts(sample_model: FactModel) -> None:
    service = {fact.kind: fact for fact in sample_model.in_file("pkg/service.py")}

    assert service[MODULE_LENGTH].value == len(SERVICE_SOURCE.splitlines())
    assert service[TEST_FILE].value is False
    assert service[LINE_LENGTH].location.start_line > 0
    assert sample_model.counters.test_files == 1


def test_import_grouping_classifies_local_packages(sample_model: FactModel) -> None:
    grouping = _facts_of(sample_model, IMPORT_GROUP_ORDER)
    service = [fact for fact in grouping if fact.location.file == "pkg/service.py"]

    assert len(service) == 1
    assert service[0].value is True
    assert service[0].location == Location("pkg/service.py", 3, 10)
    assert all(fact.value is False for fact in _facts_of(sample_model, WILDCARD_IMPORT))


def test_out_of_order_imports(tmp_path: Path) -> None:
    write_file(tmp_path, "mod.py", "import requests\nimport os\n")
    model = extract_facts(tmp_path, with_git=False)
    assert model.of_kind(IMPORT_GROUP_ORDER)[0].value is False


def test_wildcard_import(tmp_path: Path) -> None:
    write_file(tmp_path, "mod.py", "from os.path import *\n")
    model = extract_facts(tmp_path, with_git=False)

    wildcard = model.of_kind(WILDCARD_IMPORT)[0]
    assert wildcard.value is True
    assert wildcard.subject == "os.path"


def test_function_facts(sample_model: FactModel) -> None:
    fetch = {fact.kind: fact for fact in sample_model.facts if fact.subject == "Service.fetch"}

    assert fetch[FUNCTION_NAME].value == "fetch"
    assert fetch[FUNCTION_ARGS].value == 2
    assert fetch[DOCSTRING_PRESENT].value is True
    assert fetch[LOOP_DEPTH].value == 2
    assert fetch[FUNCTION_COMPLEXITY].value == 5
    assert fetch[FUNCTION_LENGTH].value == 7
    arguments = [fact.value for fact in _facts_of(sample_model, ARGUMENT_NAME, "Service.fetch")]
    assert arguments == ["url", "retries"]


def test_class_facts(sample_model: FactModel) -> None:
    service = {fact.kind: fact for fact in sample_model.facts if fact.subject == "Service"}

    assert service[CLASS_DOCSTRING_PRESENT].value is True
    assert service[CLASS_METHOD_COUNT].value == 2
    assert service[CLASS_BASES].value == 2


def test_exception_handler_facts(sample_model: FactModel) -> None:
    reset = _values_for(sample_model, "Service._reset")
    counter = _values_for(sample_model, "counter")

    assert reset[BARE_EXCEPT] is True
    assert reset[SWALLOWED_EXCEPTION] is True
    assert reset[BROAD_EXCEPT] is False
    assert counter[BARE_EXCEPT] is False
    assert counter[BROAD_EXCEPT] is True
    assert counter[SWALLOWED_EXCEPTION] is False


def test_configuration_facts(sample_model: FactModel) -> None:
    secrets = _facts_of(sample_model, HARDCODED_SECRET)
    globals_used = _facts_of(sample_model, GLOBAL_STATEMENT)

    assert [fact.subject for fact in secrets] == ["API_TOKEN"]
    assert [fact.subject for fact in globals_used] == ["COUNT"]


def test_logging_facts(sample_model: FactModel) -> None:
    definitions = sorted(fact.label for fact in _facts_of(sample_model, LOGGER_DEFINITION))
    levels = sorted(fact.label for fact in _facts_of(sample_model, LOG_CALL))
    eager = [fact for fact in _facts_of(sample_model, EAGER_LOG_FORMAT) if fact.value is True]
    prints = _facts_of(sample_model, PRINT_CALL)

    assert definitions == ["__name__", "app"]
    assert levels == ["error", "info", "warning"]
    assert [fact.subject for fact in eager] == ["Service.fetch"]
    assert [fact.location.file for fact in prints] == ["pkg/service.py"]


def test_performance_facts(sample_model: FactModel) -> None:
    range_len = [fact.subject for fact in _facts_of(sample_model, RANGE_LEN_LOOP) if fact.value]
    concat = [fact.subject for fact in _facts_of(sample_model, LOOP_STRING_CONCAT) if fact.value]

    assert range_len == ["Service.fetch"]
    assert concat == ["render"]


def test_test_function_facts(sample_model: FactModel) -> None:
    names = [fact.label for fact in _facts_of(sample_model, TEST_NAME)]
    assertions = {fact.subject: fact.value for fact in _facts_of(sample_model, TEST_ASSERTIONS)}

    assert names == ["test_service_fetch_returns_response", "test_it", "test_nothing"]
    assert assertions == {
        "test_service_fetch_returns_response": 1,
        "test_it": 1,
        "test_nothing": 0,
    }


def test_unparseable_file_keeps_line_facts(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    write_file(tmp_path, "broken.py", "def broken(:\n    pass\n")

    with caplog.at_level(logging.WARNING, logger="style_rubric.extract"):
        model = extract_facts(tmp_path, with_git=False)

    assert {fact.kind for fact in model.in_file("broken.py")} == {
        MODULE_LENGTH,
        TEST_FILE,
        LINE_LENGTH,
    }
    assert "broken.py" in caplog.text


def test_include_and_exclude_patterns(tmp_path: Path) -> None:
    write_file(tmp_path, "src/app.py", "x = 1\n")
    write_file(tmp_path, "src/legacy/old.py", "y = 2\n")
    write_file(tmp_path, "scripts/run.py", "z = 3\n")

    model = extract_facts(
        tmp_path, include=["src/*"], exclude=["src/legacy/*"], with_git=False
    )
    files = {fact.location.file for fact in model.of_kind(MODULE_LENGTH)}
    assert files == {"src/app.py"}


def test_missing_root_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not a directory"):
        extract_facts(tmp_path / "absent")


def test_gitignore_fact_without_git(tmp_path: Path) -> None:
    write_file(tmp_path, "app.py", "x = 1\n")
    model = extract_facts(tmp_path, with_git=False)

    gitignore = model.of_kind(GITIGNORE_PRESENT)
    assert [fact.value for fact in gitignore] == [False]
    assert gitignore[0].location == Location.codebase()
    assert model.of_kind(COMMIT_MESSAGE) == ()


def test_version_control_facts_from_git(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    write_file(repo, ".gitignore", "*.log\n")
    write_file(repo, "app.py", "x = 1\n")
    write_file(repo, "pkg/__pycache__/app.cpython-312.pyc", "")
    commit_all(repo, "Add application entry module")
    write_file(repo, "app.py", "x = 2\n")
    commit_all(repo, "wip")

    model = extract_facts(repo)

    gitignore = model.of_kind(GITIGNORE_PRESENT)
    assert gitignore[0].value is True
    assert gitignore[0].location == Location(".gitignore")
    subjects = [fact.label for fact in model.of_kind(COMMIT_MESSAGE)]
    assert subjects == ["wip", "Add application entry module"]
    artifacts = {fact.location.file: fact.value for fact in model.of_kind(TRACKED_ARTIFACT)}
    assert artifacts == {
        ".gitignore": False,
        "app.py": False,
        "pkg/__pycache__/app.cpython-312.pyc": True,
    }
    assert model.contains(Location("pkg/__pycache__/app.cpython-312.pyc"))


def test_empty_repository_has_no_commit_facts(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    write_file(repo, "app.py", "x = 1\n")

    model = extract_facts(repo)
    assert model.of_kind(COMMIT_MESSAGE) == ()
    assert model.of_kind(TRACKED_ARTIFACT) == ()


def test_path_classifiers() -> None:
    assert is_test_path("tests/test_app.py")
    assert is_test_path("pkg/app_test.py")
    assert is_test_path("conftest.py")
    assert not is_test_path("pkg/testing_utils.py")
    assert is_artifact_path(".env")
    assert is_artifact_path("pkg/module.pyc")
    assert is_artifact_path("demo.egg-info/PKG-INFO")
    assert not is_artifact_path(".env.example")
    assert not is_artifact_path("pkg/app.py")
