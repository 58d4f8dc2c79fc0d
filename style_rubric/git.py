"""Git subprocess helpers."""

from __future__ import annotations

from pathlib import Path
from subprocess import CalledProcessError, run


class GitError(RuntimeError):
    """Raised when git command execution fails."""


DEFAULT_COMMIT_LIMIT = 50


def is_git_repo(repo: Path) -> bool:
    """Return True when ``repo`` is inside a git work tree."""
    try:
        return _run_git(repo, ["rev-parse", "--is-inside-work-tree"]).strip() == "true"
    except GitError:
        return False


def get_commit_subjects(repo: Path, limit: int = DEFAULT_COMMIT_LIMIT) -> list[tuple[str, str]]:
    """Return ``(short_hash, subject)`` pairs for recent commits, newest first."""
    try:
        output = _run_git(repo, ["log", f"--max-count={limit}", "--format=%h%x09%s"])
    except GitError as exc:
        # a fresh repository has no HEAD yet
        if "does not have any commits" in str(exc) or "bad default revision" in str(exc):
            return []
        raise

    commits: list[tuple[str, str]] = []
    for line in output.splitlines():
        short_hash, sep, subject = line.partition("\t")
        if sep:
            commits.append((short_hash, subject))
    return commits


def get_tracked_files(repo: Path) -> list[str]:
    """Return tracked paths relative to ``repo``, sorted."""
    output = _run_git(repo, ["ls-files", "-z"])
    return sorted(item for item in output.split("\0") if item)


def _run_git(repo: Path, args: list[str]) -> str:
    try:
        completed = run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise GitError("git executable not found") from exc
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed") from exc

    return completed.stdout
