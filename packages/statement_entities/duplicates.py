"""Near-duplicate entity detection.

Public surface:
- ``levenshtein``: unit-cost edit distance.
- ``name_similarity``: ``1 - levenshtein / max_len`` on lower-cased names.
- ``find_duplicates``: advisory merge suggestions over entity groups. Nothing
  here mutates a mapping; applying a suggestion is the caller's explicit
  step (see :meth:`statement_entities.workspace.EntityWorkspace.apply_merge_suggestion`).

Comparisons run over distinct entities (tens to hundreds), so the quadratic
pairwise scan is acceptable. Edit distance comes from ``rapidfuzz``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from rapidfuzz.distance import Levenshtein

from .canonical import SmartKeyGenerator, default_smart_key_generator
from .logging_setup import get_logger
from .models import EntityGroup
from .settings import DuplicateSettings

_logger = get_logger("statement_entities.duplicates")


@dataclass(frozen=True, slots=True)
class MergeSuggestion:
    """Advisory proposal to fold ``candidates`` into ``target``."""

    target: EntityGroup
    candidates: tuple[EntityGroup, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return (self.target.name, *(c.name for c in self.candidates))


def levenshtein(a: str, b: str) -> int:
    """Return the unit-cost edit distance between ``a`` and ``b``."""

    return Levenshtein.distance(a or "", b or "")


def name_similarity(a: str, b: str) -> float:
    """Normalized similarity in ``[0, 1]``; two empty names score ``0``."""

    x, y = (a or "").lower(), (b or "").lower()
    if not x and not y:
        return 0.0
    return Levenshtein.normalized_similarity(x, y)


def _key_prefix_match(key_a: str, key_b: str, min_chars: int | None) -> bool:
    if min_chars is None or not key_a or not key_b:
        return False
    shorter, longer = sorted((key_a, key_b), key=len)
    if len(shorter) < min_chars:
        return False
    return longer == shorter or longer.startswith(shorter + " ")


def _is_duplicate(
    target: EntityGroup,
    candidate: EntityGroup,
    settings: DuplicateSettings,
    keys: dict[str, str],
) -> bool:
    a, b = target.name.lower(), candidate.name.lower()
    if not a or not b:
        return False
    similarity = name_similarity(a, b)
    if similarity > settings.similarity_threshold:
        return True
    contained = a in b or b in a
    if similarity > settings.containment_threshold and contained:
        return True
    return _key_prefix_match(
        keys[target.name], keys[candidate.name], settings.key_prefix_min_chars
    )


def find_duplicates(
    groups: Iterable[EntityGroup],
    *,
    settings: DuplicateSettings | None = None,
    key_generator: SmartKeyGenerator | None = None,
) -> list[MergeSuggestion]:
    """Propose merges between entity groups.

    Groups are visited by transaction count, largest first, so bigger groups
    become merge targets. A candidate joins a target when

    - name similarity exceeds ``similarity_threshold`` (0.8), or
    - similarity exceeds ``containment_threshold`` (0.6) and one lower-cased
      name contains the other, or
    - the smart keys are equal or one is a whole-word prefix of the other
      with at least ``key_prefix_min_chars`` characters (``AMAZON`` /
      ``AMAZON SARL``).

    A group appears in at most one suggestion per call.
    """

    cfg = settings or DuplicateSettings()
    gen = key_generator or default_smart_key_generator()
    ordered = sorted(groups, key=lambda g: g.count, reverse=True)
    keys = {g.name: gen.smart_key(g.name) for g in ordered}

    suggestions: list[MergeSuggestion] = []
    processed: set[int] = set()
    for i, target in enumerate(ordered):
        if i in processed:
            continue
        matched: list[int] = []
        for j in range(i + 1, len(ordered)):
            if j in processed:
                continue
            if _is_duplicate(target, ordered[j], cfg, keys):
                matched.append(j)
        if not matched:
            continue
        processed.add(i)
        processed.update(matched)
        suggestions.append(
            MergeSuggestion(target=target, candidates=tuple(ordered[j] for j in matched))
        )

    _logger.debug(
        "duplicate scan: %d groups, %d suggestions", len(ordered), len(suggestions)
    )
    return suggestions


__all__ = ["MergeSuggestion", "find_duplicates", "levenshtein", "name_similarity"]
