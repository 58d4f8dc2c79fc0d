"""Reference fact extractor built on the standard library ``ast`` module.

Walks a directory of Python sources and emits the fact vocabulary defined in
``style_rubric.facts``. Other parsers can replace it by producing the same
facts as a JSON document.
"""

from __future__ import annotations

import ast
import fnmatch
import logging
import re
import sys
from pathlib import Path, PurePosixPath

from style_rubric.facts import (
    ARGUMENT_NAME,
    BARE_EXCEPT,
    BROAD_EXCEPT,
    CLASS_BASES,
    CLASS_DOCSTRING_PRESENT,
    CLASS_METHOD_COUNT,
    CLASS_NAME,
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
    FactValue,
    Location,
    SourceFact,
)
from style_rubric.git import GitError, get_commit_subjects, get_tracked_files, is_git_repo

logger = logging.getLogger(__name__)

SKIP_DIRS = {
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    "node_modules",
    ".tox",
    ".nox",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    "build",
    "dist",
    ".eggs",
}

LOG_METHODS = {"debug", "info", "warning", "warn", "error", "exception", "critical", "log"}
LOGGER_NAMES = {"logger", "log", "logging", "_logger", "_log", "LOGGER", "LOG"}
BROAD_EXCEPTIONS = {"Exception", "BaseException"}
SECRET_NAME_RE = re.compile(r"(password|passwd|secret|token|api_?key|private_?key)", re.IGNORECASE)
ARTIFACT_NAMES = {".env", ".DS_Store", "Thumbs.db"}
ARTIFACT_SUFFIXES = {".pyc", ".pyo", ".so", ".egg", ".whl", ".sqlite3", ".log"}
ARTIFACT_DIRS = {"__pycache__", ".pytest_cache", ".mypy_cache", ".tox", ".venv", "venv"}

# import groups in the order they must appear
STDLIB_GROUP = 0
THIRD_PARTY_GROUP = 1
LOCAL_GROUP = 2


def extract_facts(
    root: Path,
    *,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
    with_git: bool = True,
) -> FactModel:
    """Extract a FactModel from every Python file under ``root``."""
    root = root.resolve()
    if not root.is_dir():
        raise ValueError(f"Codebase root is not a directory: {root}")

    local_modules = _local_module_names(root)
    facts: list[SourceFact] = []
    files: list[str] = []
    for path in _iter_python_files(root, includes=include or [], excludes=exclude or []):
        rel_path = path.relative_to(root).as_posix()
        files.append(rel_path)
        facts.extend(_file_facts(path, rel_path, local_modules))

    vcs_facts, vcs_files = _vcs_facts(root, with_git=with_git)
    facts.extend(vcs_facts)
    files.extend(vcs_files)
    logger.debug("Extracted %d facts from %d files under %s", len(facts), len(files), root)
    return FactModel.build(facts, files=files, root=str(root))


def is_test_path(path: str) -> bool:
    """True for paths that follow pytest test-module conventions."""
    lowered = path.lower()
    name = PurePosixPath(lowered).name
    return (
        lowered.startswith("tests/")
        or "/tests/" in lowered
        or name.startswith("test_")
        or name.endswith("_test.py")
        or name == "conftest.py"
    )


def is_artifact_path(path: str) -> bool:
    """True for generated or machine-local files that should not be tracked."""
    pure_path = PurePosixPath(path)
    if pure_path.name in ARTIFACT_NAMES or pure_path.suffix in ARTIFACT_SUFFIXES:
        return True
    return any(
        part in ARTIFACT_DIRS or part.endswith(".egg-info") for part in pure_path.parts[:-1]
    )


def _iter_python_files(root: Path, *, includes: list[str], excludes: list[str]) -> list[Path]:
    selected: list[Path] = []
    for path in sorted(root.rglob("*.py")):
        rel_path = path.relative_to(root)
        if any(part in SKIP_DIRS for part in rel_path.parts[:-1]):
            continue
        posix = rel_path.as_posix()
        if includes and not any(fnmatch.fnmatch(posix, pattern) for pattern in includes):
            continue
        if excludes and any(fnmatch.fnmatch(posix, pattern) for pattern in excludes):
            continue
        selected.append(path)
    return selected


def _local_module_names(root: Path) -> set[str]:
    names: set[str] = set()
    for base in (root, root / "src"):
        if not base.is_dir():
            continue
        for child in base.iterdir():
            if child.is_dir() and (child / "__init__.py").exists():
                names.add(child.name)
            elif child.suffix == ".py":
                names.add(child.stem)
    return names


def _file_facts(path: Path, rel_path: str, local_modules: set[str]) -> list[SourceFact]:
    text = path.read_text(encoding="utf-8", errors="replace")
    lines = text.splitlines()
    is_test = is_test_path(rel_path)

    facts = [
        SourceFact(MODULE_LENGTH, Location(rel_path), len(lines)),
        SourceFact(TEST_FILE, Location(rel_path), is_test),
    ]
    if lines:
        line_number, longest = max(enumerate(lines, start=1), key=lambda item: len(item[1]))
        facts.append(
            SourceFact(LINE_LENGTH, Location(rel_path, line_number, line_number), len(longest))
        )

    try:
        tree = ast.parse(text, filename=rel_path)
    except (SyntaxError, ValueError) as exc:
        logger.warning("Skipping syntax facts for %s: %s", rel_path, exc)
        return facts

    facts.extend(_import_facts(tree, rel_path, local_modules))
    visitor = _FactVisitor(rel_path, is_test=is_test)
    visitor.visit(tree)
    facts.extend(visitor.facts)
    return facts


def _import_facts(tree: ast.Module, rel_path: str, local_modules: set[str]) -> list[SourceFact]:
    facts: list[SourceFact] = []
    groups: list[int] = []
    first_line = last_line = 0
    for node in tree.body:
        if isinstance(node, ast.Import):
            groups.extend(_import_group(alias.name, 0, local_modules) for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            groups.append(_import_group(node.module or "", node.level, local_modules))
        else:
            continue
        first_line = first_line or node.lineno
        last_line = node.end_lineno or node.lineno

    if groups:
        facts.append(
            SourceFact(
                IMPORT_GROUP_ORDER,
                Location(rel_path, first_line, last_line),
                groups == sorted(groups),
            )
        )

    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom):
            facts.append(
                SourceFact(
                    WILDCARD_IMPORT,
                    _location(rel_path, node),
                    any(alias.name == "*" for alias in node.names),
                    subject="." * node.level + (node.module or ""),
                )
            )
    return facts


def _import_group(module: str, level: int, local_modules: set[str]) -> int:
    if level > 0:
        return LOCAL_GROUP
    top_level = module.split(".", 1)[0]
    if top_level == "__future__" or top_level in sys.stdlib_module_names:
        return STDLIB_GROUP
    if top_level in local_modules:
        return LOCAL_GROUP
    return THIRD_PARTY_GROUP


class _FactVisitor(ast.NodeVisitor):
    """Collects per-node facts for one module."""

    def __init__(self, path: str, *, is_test: bool) -> None:
        self.path = path
        self.is_test = is_test
        self.facts: list[SourceFact] = []
        self._scope: list[tuple[str, str]] = []

    @property
    def scope_name(self) -> str:
        if not self._scope:
            return f"{self.path} (module)"
        return ".".join(name for _, name in self._scope)

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        qualified = self._qualify(node.name)
        methods = [
            item for item in node.body if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef))
        ]
        self._emit(CLASS_NAME, node, node.name, qualified)
        self._emit(CLASS_DOCSTRING_PRESENT, node, ast.get_docstring(node) is not None, qualified)
        self._emit(CLASS_METHOD_COUNT, node, len(methods), qualified)
        self._emit(CLASS_BASES, node, len(node.bases), qualified)

        self._scope.append(("class", node.name))
        self.generic_visit(node)
        self._scope.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_function(node)

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        qualified = self._qualify(node.name)
        is_method = bool(self._scope) and self._scope[-1][0] == "class"
        positional = [*node.args.posonlyargs, *node.args.args]
        if is_method and positional and positional[0].arg in {"self", "cls"}:
            positional = positional[1:]
        parameters = [*positional, *node.args.kwonlyargs]
        named = [*parameters, *(arg for arg in (node.args.vararg, node.args.kwarg) if arg)]
        length = (node.end_lineno or node.lineno) - node.lineno + 1

        self._emit(FUNCTION_NAME, node, node.name, qualified)
        self._emit(FUNCTION_LENGTH, node, length, qualified)
        self._emit(FUNCTION_ARGS, node, len(parameters), qualified)
        self._emit(DOCSTRING_PRESENT, node, ast.get_docstring(node) is not None, qualified)
        self._emit(FUNCTION_COMPLEXITY, node, _complexity(node), qualified)
        self._emit(LOOP_DEPTH, node, _loop_depth(node.body), qualified)
        for arg in named:
            self._emit(ARGUMENT_NAME, arg, arg.arg, qualified)

        if self.is_test and node.name.startswith("test"):
            self._emit(TEST_NAME, node, node.name, qualified)
            self._emit(TEST_ASSERTIONS, node, _count_assertions(node), qualified)

        self._scope.append(("function", node.name))
        self.generic_visit(node)
        self._scope.pop()

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        subject = self.scope_name
        swallowed = all(
            isinstance(stmt, ast.Pass)
            or (isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant))
            for stmt in node.body
        )
        self._emit(BARE_EXCEPT, node, node.type is None, subject)
        self._emit(BROAD_EXCEPT, node, _catches_broad(node.type), subject)
        self._emit(SWALLOWED_EXCEPTION, node, swallowed, subject)
        self.generic_visit(node)

    def visit_Global(self, node: ast.Global) -> None:
        for name in node.names:
            self._emit(GLOBAL_STATEMENT, node, True, name)

    def visit_Assign(self, node: ast.Assign) -> None:
        for target in node.targets:
            self._check_secret(target, node.value, node)
        self.generic_visit(node)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        if node.value is not None:
            self._check_secret(node.target, node.value, node)
        self.generic_visit(node)

    def visit_Call(self, node: ast.Call) -> None:
        func = node.func
        if isinstance(func, ast.Name) and func.id == "print" and not self.is_test:
            self._emit(PRINT_CALL, node, True, self.scope_name)
        elif isinstance(func, ast.Attribute) and func.attr == "getLogger":
            self._emit(LOGGER_DEFINITION, node, _logger_name(node), self.scope_name)
        elif (
            isinstance(func, ast.Attribute)
            and func.attr in LOG_METHODS
            and _is_logger_target(func.value)
        ):
            self._emit(LOG_CALL, node, func.attr, self.scope_name)
            message_index = 1 if func.attr == "log" else 0
            if len(node.args) > message_index:
                self._emit(
                    EAGER_LOG_FORMAT,
                    node,
                    _is_eager_format(node.args[message_index]),
                    self.scope_name,
                )
        self.generic_visit(node)

    def visit_For(self, node: ast.For) -> None:
        self._visit_loop(node)

    def visit_AsyncFor(self, node: ast.AsyncFor) -> None:
        self._visit_loop(node)

    def visit_While(self, node: ast.While) -> None:
        self._visit_loop(node)

    def _visit_loop(self, node: ast.For | ast.AsyncFor | ast.While) -> None:
        subject = self.scope_name
        if isinstance(node, (ast.For, ast.AsyncFor)):
            self._emit(RANGE_LEN_LOOP, node, _is_range_len(node.iter), subject)
        self._emit(LOOP_STRING_CONCAT, node, _concatenates_strings(node.body), subject)
        self.generic_visit(node)

    def _check_secret(self, target: ast.expr, value: ast.expr, node: ast.stmt) -> None:
        if self.is_test or not isinstance(target, ast.Name):
            return
        if not SECRET_NAME_RE.search(target.id):
            return
        if isinstance(value, ast.Constant) and isinstance(value.value, str) and value.value:
            self._emit(HARDCODED_SECRET, node, True, target.id)

    def _qualify(self, name: str) -> str:
        return ".".join([*(scope_name for _, scope_name in self._scope), name])

    def _emit(self, kind: str, node: ast.AST, value: FactValue, subject: str) -> None:
        self.facts.append(SourceFact(kind, _location(self.path, node), value, subject=subject))


def _location(path: str, node: ast.AST) -> Location:
    start = getattr(node, "lineno", 0) or 0
    end = getattr(node, "end_lineno", None) or start
    return Location(path, start, max(start, end))


def _complexity(node: ast.AST) -> int:
    complexity = 1
    for child in ast.walk(node):
        if isinstance(
            child,
            (ast.If, ast.For, ast.AsyncFor, ast.While, ast.ExceptHandler, ast.IfExp),
        ):
            complexity += 1
        elif isinstance(child, ast.BoolOp):
            complexity += max(1, len(child.values) - 1)
    return complexity


def _loop_depth(body: list[ast.stmt]) -> int:
    deepest = 0
    for stmt in body:
        deepest = max(deepest, _stmt_loop_depth(stmt))
    return deepest


def _stmt_loop_depth(node: ast.AST) -> int:
    if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)):
        return 0
    inner = max((_stmt_loop_depth(child) for child in ast.iter_child_nodes(node)), default=0)
    if isinstance(node, (ast.For, ast.AsyncFor, ast.While)):
        return inner + 1
    return inner


def _count_assertions(node: ast.AST) -> int:
    count = 0
    for child in ast.walk(node):
        if isinstance(child, ast.Assert):
            count += 1
        elif isinstance(child, ast.Call):
            name = _call_name(child.func)
            if name.startswith("assert") or name == "raises":
                count += 1
    return count


def _call_name(func: ast.expr) -> str:
    if isinstance(func, ast.Attribute):
        return func.attr
    if isinstance(func, ast.Name):
        return func.id
    return ""


def _catches_broad(node: ast.expr | None) -> bool:
    if node is None:
        return False
    candidates = node.elts if isinstance(node, ast.Tuple) else [node]
    return any(_call_name(item) in BROAD_EXCEPTIONS for item in candidates)


def _is_logger_target(node: ast.expr) -> bool:
    if isinstance(node, ast.Name):
        return node.id in LOGGER_NAMES
    if isinstance(node, ast.Attribute):
        return node.attr in LOGGER_NAMES
    # logging.getLogger("name").info(...)
    return isinstance(node, ast.Call) and _call_name(node.func) == "getLogger"


def _logger_name(node: ast.Call) -> str:
    if not node.args:
        return "<root>"
    arg = node.args[0]
    if isinstance(arg, ast.Name):
        return arg.id
    if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
        return arg.value
    return ast.unparse(arg)


def _is_eager_format(node: ast.expr) -> bool:
    if isinstance(node, ast.JoinedStr):
        return True
    if isinstance(node, ast.BinOp) and isinstance(node.op, (ast.Mod, ast.Add)):
        return True
    return isinstance(node, ast.Call) and _call_name(node.func) == "format"


def _is_range_len(node: ast.expr) -> bool:
    if not (isinstance(node, ast.Call) and _call_name(node.func) == "range"):
        return False
    if len(node.args) != 1:
        return False
    inner = node.args[0]
    return isinstance(inner, ast.Call) and _call_name(inner.func) == "len"


def _concatenates_strings(body: list[ast.stmt]) -> bool:
    for stmt in body:
        for child in ast.walk(stmt):
            if (
                isinstance(child, ast.AugAssign)
                and isinstance(child.op, ast.Add)
                and _is_string_expr(child.value)
            ):
                return True
    return False


def _is_string_expr(node: ast.expr) -> bool:
    if isinstance(node, ast.JoinedStr):
        return True
    return isinstance(node, ast.Constant) and isinstance(node.value, str)


def _vcs_facts(root: Path, *, with_git: bool) -> tuple[list[SourceFact], list[str]]:
    facts: list[SourceFact] = []
    files: list[str] = []
    if (root / ".gitignore").is_file():
        facts.append(SourceFact(GITIGNORE_PRESENT, Location(".gitignore"), True))
        files.append(".gitignore")
    else:
        facts.append(SourceFact(GITIGNORE_PRESENT, Location.codebase(), False))

    if not with_git or not is_git_repo(root):
        return (facts, files)

    try:
        commits = get_commit_subjects(root)
        tracked = get_tracked_files(root)
    except GitError as exc:
        logger.warning("Skipping version-control facts for %s: %s", root, exc)
        return (facts, files)

    for short_hash, subject in commits:
        facts.append(SourceFact(COMMIT_MESSAGE, Location.codebase(), subject, subject=short_hash))
    for path in tracked:
        files.append(path)
        facts.append(SourceFact(TRACKED_ARTIFACT, Location(path), is_artifact_path(path)))
    return (facts, files)
