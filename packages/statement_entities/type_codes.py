"""Transaction type codes (``DD``, ``SO``, ``CARD`` …) from descriptions.

Classification scans an ordered pattern table and returns the code of the
first entry with any matching pattern. Entities get a type by plurality vote
over their member descriptions; see :func:`aggregate_type`.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import cache

from .lexicon import TYPE_PATTERNS


@dataclass(frozen=True, slots=True)
class TypePattern:
    code: str
    patterns: tuple[re.Pattern[str], ...]

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)


class TypeClassifier:
    """Classify descriptions against an immutable :class:`TypePattern` table."""

    def __init__(
        self, table: Sequence[tuple[str, Sequence[str]]] = TYPE_PATTERNS
    ) -> None:
        self._table: tuple[TypePattern, ...] = tuple(
            TypePattern(code, tuple(re.compile(p, re.IGNORECASE) for p in patterns))
            for code, patterns in table
        )

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(entry.code for entry in self._table)

    def classify(self, description: str | None) -> str:
        if not description:
            return ""
        for entry in self._table:
            if entry.matches(description):
                return entry.code
        return ""

    def aggregate(self, descriptions: Iterable[str | None]) -> str:
        """Return the plurality code over ``descriptions``.

        Empty classifications do not vote. Ties go to the longer code, then
        to the code seen first. Returns ``""`` when nothing matched.
        """

        votes = Counter(c for c in (self.classify(d) for d in descriptions) if c)
        winner = ""
        best = 0
        for code, count in votes.items():
            if count > best or (count == best and len(code) > len(winner)):
                winner, best = code, count
        return winner


@cache
def default_type_classifier() -> TypeClassifier:
    return TypeClassifier()


def classify_type(description: str | None) -> str:
    """Return the type code for ``description`` or ``""``."""

    return default_type_classifier().classify(description)


def aggregate_type(descriptions: Iterable[str | None]) -> str:
    return default_type_classifier().aggregate(descriptions)


__all__ = [
    "TypeClassifier",
    "TypePattern",
    "aggregate_type",
    "classify_type",
    "default_type_classifier",
]
