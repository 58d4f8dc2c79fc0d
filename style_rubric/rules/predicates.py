"""Reusable fact predicates for declarative rule entries."""

from __future__ import annotations

import re

from style_rubric.facts import SourceFact
from style_rubric.rules.base import FactPredicate

SNAKE_CASE_RE = re.compile(r"^_{0,2}[a-z][a-z0-9]*(?:_[a-z0-9]+)*_{0,2}$")
CAP_WORDS_RE = re.compile(r"^_?[A-Z][a-zA-Z0-9]*$")

CONVENTIONAL_SHORT_NAMES = frozenset({"_", "i", "j", "k", "n", "x", "y", "z", "f", "e"})


def at_most(limit: float) -> FactPredicate:
    """Numeric fact is within ``limit``."""

    def check(fact: SourceFact) -> bool:
        return fact.number <= limit

    return check


def at_least(limit: float) -> FactPredicate:
    def check(fact: SourceFact) -> bool:
        return fact.number >= limit

    return check


def is_true(fact: SourceFact) -> bool:
    return fact.value is True


def is_false(fact: SourceFact) -> bool:
    return fact.value is False


def is_snake_case(fact: SourceFact) -> bool:
    return bool(SNAKE_CASE_RE.match(fact.label))


def is_cap_words(fact: SourceFact) -> bool:
    return bool(CAP_WORDS_RE.match(fact.label))


def is_descriptive(fact: SourceFact) -> bool:
    name = fact.label
    return len(name) > 1 or name in CONVENTIONAL_SHORT_NAMES


def is_public(fact: SourceFact) -> bool:
    """Last segment of the subject is a public name; dunders are not.

    Facts without a subject cannot be ruled private and count as public.
    """
    name = fact.subject.rsplit(".", 1)[-1]
    return not name.startswith("_")
