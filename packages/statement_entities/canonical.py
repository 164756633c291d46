"""Entity-name normalization shared by every feature that groups descriptions.

Two passes are exposed:

- :class:`Canonicalizer` strips banking jargon (``DIRECT DEBIT``, ``BGC/FPI``,
  ``REF:1234`` …) and yields a display-grade entity candidate.
- :class:`SmartKeyGenerator` runs the same stripping and then removes generic
  stop words, most numbers and punctuation. Its keys are used for clustering
  and duplicate hints only and are never shown to users.

Both classes compile their tables once at construction and hold no mutable
state, so a single instance can be shared freely. :func:`canonicalize` and
:func:`smart_key` use lazily built default instances.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import cache

from .lexicon import BANKING_TERMS, GENERIC_NOISE, REFERENCE_MARKERS

_WS_RE = re.compile(r"\s+")
_WORD_START_RE = re.compile(r"^\w")
_WORD_END_RE = re.compile(r"\w$")
# A reference code following a marker; must carry at least one digit.
_REFERENCE_CODE = r"(?:\s*(?=[A-Z0-9/\-]*\d)[A-Z0-9/\-]+)?"
_NUMBER_TOKEN_RE = re.compile(r"\b\d+\b")
_NON_KEY_CHARS_RE = re.compile(r"[^A-Z0-9\s&]")
_KEPT_NUMBER_LENGTHS = frozenset({6, 8})

UNKNOWN_ENTITY = "UNKNOWN"


def collapse_whitespace(text: str) -> str:
    """Return ``text`` with whitespace runs folded to one space and trimmed."""

    return _WS_RE.sub(" ", text).strip()


def _term_pattern(term: str, *, reference: bool = False) -> re.Pattern[str]:
    # Boundaries only on alphanumeric edges so "REF:" needs none after ':'.
    start = r"\b" if _WORD_START_RE.search(term) else ""
    end = r"\b" if _WORD_END_RE.search(term) else ""
    suffix = _REFERENCE_CODE if reference else ""
    return re.compile(f"{start}{re.escape(term)}{end}{suffix}", re.IGNORECASE)


class Canonicalizer:
    """Strip a fixed jargon lexicon from raw statement descriptions.

    Terms are matched longest first so multi-word phrases win over the
    shorter terms they contain ("DIRECT DEBIT" before "DD").
    """

    def __init__(
        self,
        terms: Iterable[str] = BANKING_TERMS,
        *,
        reference_markers: Iterable[str] = REFERENCE_MARKERS,
    ) -> None:
        markers = frozenset(m.upper() for m in reference_markers)
        ordered = sorted({t.upper(): None for t in terms if t.strip()}, key=len, reverse=True)
        self._terms: tuple[str, ...] = tuple(ordered)
        self._patterns: tuple[re.Pattern[str], ...] = tuple(
            _term_pattern(t, reference=t in markers) for t in ordered
        )

    @property
    def terms(self) -> tuple[str, ...]:
        return self._terms

    def strip_jargon(self, text: str) -> str:
        """Remove every lexicon term from ``text`` until nothing else matches.

        No fallback is applied; the result may be empty.
        """

        current = collapse_whitespace(text.upper())
        previous = None
        # Removal can expose a new word boundary; repeat until stable.
        while current != previous:
            previous = current
            for pattern in self._patterns:
                current = pattern.sub(" ", current)
            current = collapse_whitespace(current)
        return current

    def canonicalize(self, raw: str | None) -> str:
        if not raw:
            return UNKNOWN_ENTITY
        cleaned = self.strip_jargon(raw)
        if len(cleaned) < 2:
            return raw.strip() or UNKNOWN_ENTITY
        return cleaned

    __call__ = canonicalize


class SmartKeyGenerator:
    """Build aggressive clustering keys on top of a :class:`Canonicalizer`."""

    def __init__(
        self,
        canonicalizer: Canonicalizer | None = None,
        *,
        stop_words: Iterable[str] = GENERIC_NOISE,
    ) -> None:
        self._canonicalizer = canonicalizer or default_canonicalizer()
        self._stop_patterns: tuple[re.Pattern[str], ...] = tuple(
            re.compile(rf"\b{re.escape(w.upper())}\b") for w in stop_words if w.strip()
        )

    def smart_key(self, raw: str | None) -> str:
        if not raw:
            return ""
        text = self._canonicalizer.strip_jargon(raw)
        for pattern in self._stop_patterns:
            text = pattern.sub(" ", text)
        # 6 and 8 digit runs are usually dates or sort codes worth keeping.
        text = _NUMBER_TOKEN_RE.sub(
            lambda m: m.group(0) if len(m.group(0)) in _KEPT_NUMBER_LENGTHS else " ", text
        )
        text = _NON_KEY_CHARS_RE.sub(" ", text)
        return collapse_whitespace(text)

    __call__ = smart_key


@cache
def default_canonicalizer() -> Canonicalizer:
    return Canonicalizer()


@cache
def default_smart_key_generator() -> SmartKeyGenerator:
    return SmartKeyGenerator(default_canonicalizer())


def canonicalize(raw: str | None) -> str:
    """Return the display-grade entity name for a raw description."""

    return default_canonicalizer().canonicalize(raw)


def smart_key(raw: str | None) -> str:
    """Return the clustering key for a raw description or entity name."""

    return default_smart_key_generator().smart_key(raw)


__all__ = [
    "UNKNOWN_ENTITY",
    "Canonicalizer",
    "SmartKeyGenerator",
    "canonicalize",
    "collapse_whitespace",
    "default_canonicalizer",
    "default_smart_key_generator",
    "smart_key",
]
