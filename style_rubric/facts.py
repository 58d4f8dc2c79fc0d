"""Source fact model primitives.

A ``FactModel`` is the read-only snapshot that every rule evaluates. It is
produced by a source-analysis collaborator, either the bundled extractor in
``style_rubric.extract`` or any parser that emits the JSON document handled by
``fact_model_from_mapping``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

FactValue = bool | int | float | str

CODEBASE = "."

MODULE_LENGTH = "module_length"
LINE_LENGTH = "line_length"
IMPORT_GROUP_ORDER = "import_group_order"
WILDCARD_IMPORT = "wildcard_import"
TEST_FILE = "test_file"
FUNCTION_NAME = "function_name"
ARGUMENT_NAME = "argument_name"
CLASS_NAME = "class_name"
FUNCTION_LENGTH = "function_length"
FUNCTION_ARGS = "function_args"
FUNCTION_COMPLEXITY = "function_complexity"
LOOP_DEPTH = "loop_depth"
DOCSTRING_PRESENT = "docstring_present"
CLASS_DOCSTRING_PRESENT = "class_docstring_present"
CLASS_METHOD_COUNT = "class_method_count"
CLASS_BASES = "class_bases"
BARE_EXCEPT = "bare_except"
BROAD_EXCEPT = "broad_except"
SWALLOWED_EXCEPTION = "swallowed_exception"
GLOBAL_STATEMENT = "global_statement"
HARDCODED_SECRET = "hardcoded_secret"
TEST_NAME = "test_name"
TEST_ASSERTIONS = "test_assertions"
LOG_CALL = "log_call"
EAGER_LOG_FORMAT = "eager_log_format"
LOGGER_DEFINITION = "logger_definition"
PRINT_CALL = "print_call"
RANGE_LEN_LOOP = "range_len_loop"
LOOP_STRING_CONCAT = "loop_string_concat"
GITIGNORE_PRESENT = "gitignore_present"
COMMIT_MESSAGE = "commit_message"
TRACKED_ARTIFACT = "tracked_artifact"

KNOWN_FACT_KINDS = frozenset(
    {
        MODULE_LENGTH,
        LINE_LENGTH,
        IMPORT_GROUP_ORDER,
        WILDCARD_IMPORT,
        TEST_FILE,
        FUNCTION_NAME,
        ARGUMENT_NAME,
        CLASS_NAME,
        FUNCTION_LENGTH,
        FUNCTION_ARGS,
        FUNCTION_COMPLEXITY,
        LOOP_DEPTH,
        DOCSTRING_PRESENT,
        CLASS_DOCSTRING_PRESENT,
        CLASS_METHOD_COUNT,
        CLASS_BASES,
        BARE_EXCEPT,
        BROAD_EXCEPT,
        SWALLOWED_EXCEPTION,
        GLOBAL_STATEMENT,
        HARDCODED_SECRET,
        TEST_NAME,
        TEST_ASSERTIONS,
        LOG_CALL,
        EAGER_LOG_FORMAT,
        LOGGER_DEFINITION,
        PRINT_CALL,
        RANGE_LEN_LOOP,
        LOOP_STRING_CONCAT,
        GITIGNORE_PRESENT,
        COMMIT_MESSAGE,
        TRACKED_ARTIFACT,
    }
)


@dataclass(frozen=True, slots=True)
class Location:
    """A file and inclusive line range; line 0 means the whole file."""

    file: str
    start_line: int = 0
    end_line: int = 0

    def __post_init__(self) -> None:
        if not self.file:
            raise ValueError("location file must not be empty")
        if self.start_line < 0 or self.end_line < self.start_line:
            raise ValueError(
                f"invalid line range {self.start_line}-{self.end_line} for {self.file}"
            )

    @classmethod
    def codebase(cls) -> Location:
        return cls(CODEBASE)

    def __str__(self) -> str:
        if self.start_line == 0:
            return self.file
        if self.end_line == self.start_line:
            return f"{self.file}:{self.start_line}"
        return f"{self.file}:{self.start_line}-{self.end_line}"


@dataclass(frozen=True, slots=True)
class SourceFact:
    """An atomic observation about the codebase."""

    kind: str
    location: Location
    value: FactValue
    subject: str = ""

    def __post_init__(self) -> None:
        if not self.kind:
            raise ValueError("fact kind must not be empty")
        if not isinstance(self.value, (bool, int, float, str)):
            raise ValueError(
                f"fact '{self.kind}' at {self.location} has unsupported value "
                f"type {type(self.value).__name__}"
            )

    @property
    def number(self) -> float:
        """Numeric view of the value; labels are not numbers."""
        if isinstance(self.value, str):
            raise TypeError(f"fact '{self.kind}' at {self.location} holds a label, not a number")
        return float(self.value)

    @property
    def label(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class FactCounters:
    """Aggregate counters derived once at model construction."""

    total_files: int = 0
    test_files: int = 0
    total_functions: int = 0
    documented_functions: int = 0
    total_classes: int = 0

    @property
    def source_files(self) -> int:
        return self.total_files - self.test_files


@dataclass(frozen=True, slots=True)
class FactModel:
    """Immutable, indexed collection of facts for one codebase snapshot."""

    root: str
    facts: tuple[SourceFact, ...]
    files: frozenset[str]
    counters: FactCounters
    _by_kind: Mapping[str, tuple[SourceFact, ...]] = field(repr=False, compare=False)
    _by_file: Mapping[str, tuple[SourceFact, ...]] = field(repr=False, compare=False)

    @classmethod
    def build(
        cls,
        facts: Iterable[SourceFact],
        *,
        files: Iterable[str] | None = None,
        root: str = CODEBASE,
    ) -> FactModel:
        """Build a model, indexing facts and deriving counters.

        ``files`` lists every file the collaborator inspected. When omitted the
        file set is derived from the fact locations.
        """
        ordered = tuple(facts)
        known_files = {fact.location.file for fact in ordered}
        if files is not None:
            known_files.update(files)
        known_files.discard(CODEBASE)

        by_kind: dict[str, list[SourceFact]] = {}
        by_file: dict[str, list[SourceFact]] = {}
        for fact in ordered:
            by_kind.setdefault(fact.kind, []).append(fact)
            by_file.setdefault(fact.location.file, []).append(fact)

        return cls(
            root=root,
            facts=ordered,
            files=frozenset(known_files),
            counters=_count(by_kind),
            _by_kind=MappingProxyType({kind: tuple(items) for kind, items in by_kind.items()}),
            _by_file=MappingProxyType({path: tuple(items) for path, items in by_file.items()}),
        )

    def of_kind(self, kind: str) -> tuple[SourceFact, ...]:
        return self._by_kind.get(kind, ())

    def in_file(self, path: str) -> tuple[SourceFact, ...]:
        return self._by_file.get(path, ())

    def kinds(self) -> frozenset[str]:
        return frozenset(self._by_kind)

    def contains(self, location: Location) -> bool:
        """True when the location refers to the codebase or one of its files."""
        return location.file == CODEBASE or location.file in self.files

    def is_empty(self) -> bool:
        return not self.facts and not self.files

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "files": sorted(self.files),
            "facts": [_serialize_fact(fact) for fact in self.facts],
        }


def fact_model_from_mapping(payload: Mapping[str, Any]) -> FactModel:
    """Build a FactModel from the JSON document emitted by a fact extractor."""
    raw_facts = payload.get("facts")
    if not isinstance(raw_facts, list):
        raise ValueError("facts document must contain a 'facts' list")

    raw_files = payload.get("files")
    if raw_files is not None and not (
        isinstance(raw_files, list) and all(isinstance(item, str) for item in raw_files)
    ):
        raise ValueError("facts document 'files' must be a list of strings")

    root = payload.get("root", CODEBASE)
    if not isinstance(root, str):
        raise ValueError("facts document 'root' must be a string")

    facts: list[SourceFact] = []
    for index, item in enumerate(raw_facts):
        if not isinstance(item, dict):
            raise ValueError(f"facts[{index}] must be an object")
        facts.append(_parse_fact(item, index))
    return FactModel.build(facts, files=raw_files, root=root)


def load_fact_model(path: Path) -> FactModel:
    """Load a facts JSON document from disk."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid facts JSON in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Facts document {path} must be a JSON object")
    return fact_model_from_mapping(payload)


def _parse_fact(item: dict[str, Any], index: int) -> SourceFact:
    kind = item.get("kind")
    file = item.get("file")
    if not isinstance(kind, str) or not isinstance(file, str):
        raise ValueError(f"facts[{index}] requires string 'kind' and 'file'")

    start_line = item.get("start_line", 0)
    end_line = item.get("end_line", start_line)
    if not isinstance(start_line, int) or not isinstance(end_line, int):
        raise ValueError(f"facts[{index}] line numbers must be integers")

    subject = item.get("subject", "")
    if not isinstance(subject, str):
        raise ValueError(f"facts[{index}].subject must be a string")

    if "value" not in item:
        raise ValueError(f"facts[{index}] is missing 'value'")
    return SourceFact(
        kind=kind,
        location=Location(file, start_line, end_line),
        value=item["value"],
        subject=subject,
    )


def _serialize_fact(fact: SourceFact) -> dict[str, Any]:
    return {
        "kind": fact.kind,
        "file": fact.location.file,
        "start_line": fact.location.start_line,
        "end_line": fact.location.end_line,
        "value": fact.value,
        "subject": fact.subject,
    }


def _count(by_kind: dict[str, list[SourceFact]]) -> FactCounters:
    test_file_facts = by_kind.get(TEST_FILE, [])
    module_files = {fact.location.file for fact in by_kind.get(MODULE_LENGTH, [])}
    module_files.update(fact.location.file for fact in test_file_facts)
    test_files = {fact.location.file for fact in test_file_facts if fact.value is True}
    docstrings = by_kind.get(DOCSTRING_PRESENT, [])
    return FactCounters(
        total_files=len(module_files),
        test_files=len(test_files),
        total_functions=len(by_kind.get(FUNCTION_LENGTH, [])) or len(docstrings),
        documented_functions=sum(1 for fact in docstrings if fact.value is True),
        total_classes=len(by_kind.get(CLASS_NAME, [])),
    )
