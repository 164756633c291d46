"""Entity mapping state and the derived per-entity view.

:class:`EntityWorkspace` owns the only mutable tables in the package:

- ``mappings``: raw description -> canonical name overrides. A description
  without an override resolves to ``canonicalize(description)``.
- ``categories``, ``types``, ``comments``: annotations keyed by canonical
  name.

Everything else (entity groups, duplicate and cluster proposals, trim
previews) is computed from these tables on demand. The host owns snapshots
and persistence; the read-only properties return copies suitable for both.

Clearing an override with ``set_entity_mapping(raw, None)`` does not touch
annotations keyed by the abandoned name. Call
:meth:`EntityWorkspace.prune_orphaned_annotations` to drop annotations that
no row resolves to any more.
"""

from __future__ import annotations

import re
from collections import Counter, defaultdict
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from .canonical import (
    Canonicalizer,
    SmartKeyGenerator,
    collapse_whitespace,
    default_canonicalizer,
    default_smart_key_generator,
)
from .clusters import Cluster, build_clusters
from .duplicates import MergeSuggestion, find_duplicates
from .errors import InvalidMergeTarget
from .logging_setup import get_logger
from .models import EntityGroup, RawTransaction
from .settings import DuplicateSettings
from .trim_rules import CompiledRuleSet, TrimMode, TrimPreview, apply_trim, preview_trim
from .type_codes import TypeClassifier, default_type_classifier

_logger = get_logger("statement_entities.workspace")


@dataclass(frozen=True, slots=True)
class AnnotationCarryOver:
    """Annotations copied onto new names by a bulk remap."""

    categories: dict[str, str] = field(default_factory=dict)
    comments: dict[str, str] = field(default_factory=dict)


class CaseMode(str, Enum):
    SENTENCE = "SENTENCE"  # first letter upper, rest lower
    LOWER = "LOWER"
    UPPER = "UPPER"
    TITLE = "TITLE"  # each space-separated word capitalized
    TOGGLE = "TOGGLE"  # swap the case of every letter


def _title(text: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in text.lower().split(" "))


_CASE_CONVERTERS: dict[CaseMode, Callable[[str], str]] = {
    CaseMode.SENTENCE: lambda s: s[:1].upper() + s[1:].lower(),
    CaseMode.LOWER: str.lower,
    CaseMode.UPPER: str.upper,
    CaseMode.TITLE: _title,
    CaseMode.TOGGLE: str.swapcase,
}


def _validated_name(raw: str, target: object) -> str:
    if not isinstance(target, str) or not target.strip():
        raise InvalidMergeTarget(raw, target)
    return target.strip()


class EntityWorkspace:
    """Working set of transactions plus entity mapping and annotations."""

    def __init__(
        self,
        transactions: Iterable[RawTransaction],
        *,
        mappings: Mapping[str, str] | None = None,
        categories: Mapping[str, str] | None = None,
        comments: Mapping[str, str] | None = None,
        types: Mapping[str, str] | None = None,
        canonicalizer: Canonicalizer | None = None,
        key_generator: SmartKeyGenerator | None = None,
        type_classifier: TypeClassifier | None = None,
    ) -> None:
        self._transactions: tuple[RawTransaction, ...] = tuple(transactions)
        self._canonicalizer = canonicalizer or default_canonicalizer()
        if key_generator is None:
            key_generator = (
                SmartKeyGenerator(canonicalizer) if canonicalizer else default_smart_key_generator()
            )
        self._key_generator = key_generator
        self._classifier = type_classifier or default_type_classifier()
        self._mappings: dict[str, str] = {}
        for raw, name in (mappings or {}).items():
            self._mappings[raw] = _validated_name(raw, name)
        self._categories: dict[str, str] = dict(categories or {})
        self._comments: dict[str, str] = dict(comments or {})
        self._types: dict[str, str] = dict(types or {})

    # ---- read-only views -------------------------------------------------

    @property
    def transactions(self) -> tuple[RawTransaction, ...]:
        return self._transactions

    @property
    def mappings(self) -> dict[str, str]:
        return dict(self._mappings)

    @property
    def categories(self) -> dict[str, str]:
        return dict(self._categories)

    @property
    def comments(self) -> dict[str, str]:
        return dict(self._comments)

    @property
    def types(self) -> dict[str, str]:
        return dict(self._types)

    def get_entity_mapping(self, raw: str) -> str:
        """Return the canonical name ``raw`` currently resolves to."""

        override = self._mappings.get(raw)
        if override is not None:
            return override
        return self._canonicalizer.canonicalize(raw)

    def has_override(self, raw: str) -> bool:
        return raw in self._mappings

    def entity_groups(self) -> list[EntityGroup]:
        """Group every transaction by resolved name, sorted by name."""

        members: dict[str, list[RawTransaction]] = defaultdict(list)
        for tx in self._transactions:
            members[self.get_entity_mapping(tx.description)].append(tx)

        groups = []
        for name in sorted(members):
            txs = members[name]
            groups.append(
                EntityGroup(
                    name=name,
                    category=self._categories.get(name, ""),
                    type=self._types.get(name, ""),
                    comment=self._comments.get(name, ""),
                    count=len(txs),
                    total_in=sum((t.amount_in for t in txs), Decimal(0)),
                    total_out=sum((t.amount_out for t in txs), Decimal(0)),
                    members=tuple(txs),
                )
            )
        return groups

    def _raw_descriptions(self, names: Iterable[str] | None = None) -> list[str]:
        wanted = None if names is None else set(names)
        out = dict.fromkeys(
            tx.description
            for tx in self._transactions
            if wanted is None or self.get_entity_mapping(tx.description) in wanted
        )
        return list(out)

    # ---- mapping mutations -----------------------------------------------

    def set_entity_mapping(self, raw: str, canonical_name: str | None) -> None:
        """Override (or with ``None`` clear) the canonical name for ``raw``.

        Raises :class:`InvalidMergeTarget` for a blank name before touching
        any table.
        """

        if canonical_name is None:
            if self._mappings.pop(raw, None) is not None:
                _logger.debug("cleared mapping for %r", raw)
            return
        name = _validated_name(raw, canonical_name)
        self._mappings[raw] = name
        _logger.debug("mapped %r -> %r", raw, name)

    def _carry_over(self, new_map: Mapping[str, str]) -> AnnotationCarryOver:
        votes: dict[str, Counter[str]] = defaultdict(Counter)
        comments: dict[str, str] = {}
        for raw, new_name in new_map.items():
            current = self.get_entity_mapping(raw)
            if current == new_name:
                continue
            category = self._categories.get(current)
            if category and not self._categories.get(new_name):
                votes[new_name][category] += 1
            comment = self._comments.get(current)
            if comment and not self._comments.get(new_name) and new_name not in comments:
                comments[new_name] = comment
        categories = {name: counter.most_common(1)[0][0] for name, counter in votes.items()}
        return AnnotationCarryOver(categories=categories, comments=comments)

    def apply_mappings(
        self, new_map: Mapping[str, str], *, carry_annotations: bool = True
    ) -> AnnotationCarryOver:
        """Apply many overrides at once.

        Every target is validated before anything changes. With
        ``carry_annotations`` a renamed entity's category (plurality over the
        remapped descriptions) and comment follow it to the new name when the
        new name has none of its own.
        """

        validated = {raw: _validated_name(raw, name) for raw, name in new_map.items()}
        carried = self._carry_over(validated) if carry_annotations else AnnotationCarryOver()
        self._mappings.update(validated)
        self._categories.update(carried.categories)
        self._comments.update(carried.comments)
        _logger.info(
            "applied %d mappings (%d categories, %d comments carried)",
            len(validated),
            len(carried.categories),
            len(carried.comments),
        )
        return carried

    def preview_trim_rules(
        self,
        rule_set: CompiledRuleSet,
        mode: TrimMode | str,
        *,
        names: Iterable[str] | None = None,
    ) -> list[TrimPreview]:
        """Preview trimming the current entity names (all, or ``names``)."""

        targets = [self.get_entity_mapping(raw) for raw in self._raw_descriptions(names)]
        return preview_trim(targets, rule_set, mode, limit=None)

    def apply_trim_rules(
        self,
        rule_set: CompiledRuleSet,
        mode: TrimMode | str,
        *,
        names: Iterable[str] | None = None,
        exclude: Iterable[str] = (),
    ) -> dict[str, str]:
        """Commit a trim over the current entity names.

        ``exclude`` holds entity names the user unticked in the preview. Only
        descriptions whose name actually changes are remapped; the applied
        map is returned.
        """

        skipped = set(exclude)
        new_map: dict[str, str] = {}
        for raw in self._raw_descriptions(names):
            current = self.get_entity_mapping(raw)
            if current in skipped:
                continue
            trimmed = apply_trim(current, rule_set, mode)
            if trimmed != current:
                new_map[raw] = trimmed
        if new_map:
            self.apply_mappings(new_map)
        return new_map

    # ---- clean / revert --------------------------------------------------

    def _remap(self, names: Iterable[str] | None, rename: Callable[[str], str]) -> dict[str, str]:
        new_map: dict[str, str] = {}
        for raw in self._raw_descriptions(names):
            renamed = rename(raw).strip()
            if renamed and renamed != self.get_entity_mapping(raw):
                new_map[raw] = renamed
        if new_map:
            self.apply_mappings(new_map)
        return new_map

    def auto_clean(self, names: Iterable[str] | None = None) -> dict[str, str]:
        """Rename descriptions to their smart key.

        Keys shorter than two characters fall back to the canonical name.
        Returns the applied map.
        """

        def rename(raw: str) -> str:
            key = self._key_generator.smart_key(raw)
            return key if len(key) >= 2 else self._canonicalizer.canonicalize(raw)

        return self._remap(names, rename)

    def revert_names(self, names: Iterable[str] | None = None) -> dict[str, str]:
        """Map each description back to its own raw text."""

        return self._remap(names, lambda raw: raw)

    def remove_text(self, text: str, names: Iterable[str] | None = None) -> dict[str, str]:
        """Delete every case-insensitive occurrence of ``text`` from the
        current names. A name that would end up empty is left as it was."""

        needle = (text or "").strip()
        if not needle:
            return {}
        pattern = re.compile(re.escape(needle), re.IGNORECASE)

        def rename(raw: str) -> str:
            current = self.get_entity_mapping(raw)
            return collapse_whitespace(pattern.sub("", current)) or current

        return self._remap(names, rename)

    def strip_prefix(
        self,
        *,
        length: int | None = None,
        after: str | None = None,
        names: Iterable[str] | None = None,
    ) -> dict[str, str]:
        """Rename from the raw description minus a leading part.

        Pass exactly one of ``length`` (drop that many characters; ignored when
        the description is not longer) or ``after`` (keep only the text after
        its first occurrence; case-sensitive). An empty result keeps the
        current name.
        """

        if (length is None) == (after is None):
            raise ValueError("pass exactly one of length or after")

        def rename(raw: str) -> str:
            result = raw
            if length is not None:
                if 0 < length < len(raw):
                    result = raw[length:]
            elif after:
                idx = raw.find(after)
                if idx != -1:
                    result = raw[idx + len(after):]
            return result.strip() or self.get_entity_mapping(raw)

        return self._remap(names, rename)

    def change_case(
        self, mode: CaseMode | str, names: Iterable[str] | None = None
    ) -> dict[str, str]:
        """Re-case the current names; see :class:`CaseMode`."""

        convert = _CASE_CONVERTERS[CaseMode(mode)]
        return self._remap(names, lambda raw: convert(self.get_entity_mapping(raw)))

    def merge_entities(
        self, target: str, names: Iterable[str], *, category: str | None = None
    ) -> int:
        """Map every description of ``names`` to ``target``.

        Returns the number of descriptions remapped.
        """

        name = _validated_name(target, target)
        new_map = {raw: name for raw in self._raw_descriptions(names)}
        self.apply_mappings(new_map)
        if category is not None:
            self.set_category(name, category)
        return len(new_map)

    def apply_merge_suggestion(
        self, suggestion: MergeSuggestion, *, target_name: str | None = None
    ) -> int:
        return self.merge_entities(target_name or suggestion.target.name, suggestion.names)

    def apply_clusters(self, clusters: Iterable[Cluster]) -> int:
        new_map: dict[str, str] = {}
        for cluster in clusters:
            for raw in self._raw_descriptions(cluster.members):
                new_map[raw] = cluster.name
        if new_map:
            self.apply_mappings(new_map)
        return len(new_map)

    # ---- annotations -----------------------------------------------------

    @staticmethod
    def _set_annotation(table: dict[str, str], name: str, value: str | None) -> None:
        if value is None or not value.strip():
            table.pop(name, None)
        else:
            table[name] = value.strip()

    def set_category(self, name: str, category: str | None) -> None:
        self._set_annotation(self._categories, name, category)

    def set_type(self, name: str, type_code: str | None) -> None:
        self._set_annotation(self._types, name, type_code)

    def set_comment(self, name: str, comment: str | None) -> None:
        self._set_annotation(self._comments, name, comment)

    def auto_populate_types(self) -> dict[str, str]:
        """Assign a type code to every entity without one, by plurality vote
        over its member descriptions. Returns the codes assigned."""

        assigned: dict[str, str] = {}
        for group in self.entity_groups():
            if self._types.get(group.name, "").strip():
                continue
            code = self._classifier.aggregate(m.description for m in group.members)
            if code:
                assigned[group.name] = code
        self._types.update(assigned)
        _logger.info("auto-populated types for %d entities", len(assigned))
        return assigned

    def prune_orphaned_annotations(self) -> int:
        """Drop annotations keyed by names no transaction resolves to."""

        live = {self.get_entity_mapping(tx.description) for tx in self._transactions}
        removed = 0
        for table in (self._categories, self._comments, self._types):
            for name in [n for n in table if n not in live]:
                del table[name]
                removed += 1
        return removed

    # ---- advisory proposals ----------------------------------------------

    def find_duplicates(self, settings: DuplicateSettings | None = None) -> list[MergeSuggestion]:
        return find_duplicates(self.entity_groups(), settings=settings)

    def build_clusters(self, min_overlap_chars: int = 3) -> list[Cluster]:
        return build_clusters(self.entity_groups(), min_overlap_chars)


__all__ = ["AnnotationCarryOver", "CaseMode", "EntityWorkspace"]
