"""Version-control hygiene rules."""

from __future__ import annotations

from style_rubric.categories import Category
from style_rubric.config import RuleLimits
from style_rubric.facts import COMMIT_MESSAGE, GITIGNORE_PRESENT, TRACKED_ARTIFACT, SourceFact
from style_rubric.rules.base import FactPredicate, PresenceRule, RatioRule, Rule
from style_rubric.rules.predicates import is_false

GENERIC_SUBJECTS = frozenset(
    {"wip", "fix", "fixes", "update", "updates", "changes", "misc", "stuff", "tmp", "test"}
)


def _commit_subject_check(minimum: int, maximum: int) -> FactPredicate:
    def check(fact: SourceFact) -> bool:
        subject = fact.label.strip()
        if subject.lower().rstrip(".") in GENERIC_SUBJECTS:
            return False
        return minimum <= len(subject) <= maximum

    return check


def version_control_rules(limits: RuleLimits) -> list[Rule]:
    return [
        PresenceRule(
            rule_id="version_control.gitignore",
            category=Category.VERSION_CONTROL,
            weight=0.3,
            description="The repository has a .gitignore.",
            fact_kind=GITIGNORE_PRESENT,
            message="No .gitignore at the repository root.",
            suggestion="Add a .gitignore covering caches, virtualenvs and build output.",
        ),
        RatioRule(
            rule_id="version_control.commit_messages",
            category=Category.VERSION_CONTROL,
            weight=0.5,
            description=(
                f"Commit subjects are {limits.min_commit_subject}-"
                f"{limits.max_commit_subject} characters and specific."
            ),
            fact_kind=COMMIT_MESSAGE,
            predicate=_commit_subject_check(
                limits.min_commit_subject, limits.max_commit_subject
            ),
            message="Commit {subject} has subject '{value}'.",
            suggestion=(
                "Write specific commit subjects of "
                f"{limits.min_commit_subject}-{limits.max_commit_subject} characters."
            ),
        ),
        RatioRule(
            rule_id="version_control.tracked_artifacts",
            category=Category.VERSION_CONTROL,
            weight=0.2,
            description="Generated artifacts and local env files are not committed.",
            fact_kind=TRACKED_ARTIFACT,
            predicate=is_false,
            message="Generated or local file {file} is tracked.",
            suggestion="Untrack generated artifacts and add them to .gitignore.",
        ),
    ]
