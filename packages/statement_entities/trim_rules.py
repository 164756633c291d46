"""Trim rules: a tiny placeholder DSL for removing text from many descriptions.

Rule text
---------
Rules are separated by newlines, ``|`` or the upper-case token `` OR ``. Each
rule is literal text interleaved with bracket placeholders:

``[date]``        numeric ``d/m/y`` (``/``, ``-`` or ``.``), ``12 Mar 2023``,
                  ``Mar 2023`` or a bare 6-digit date
``[number]``      one or more digits as a standalone token (``[numbers]`` too)
``[letter]``      a 1-5 character alphanumeric/hyphen token
``[mix]``         one or more alphanumeric characters
``[fuzzy date]``  digits, month fragment, digits; no word boundaries so OCR
                  noise such as ``12MAR23X`` still matches
``["text"]``      quoted literal

Any other bracket content is matched literally, brackets included. Literal
whitespace matches any run of whitespace, and consecutive tokens may be
separated by optional whitespace.

Example
-------
>>> rules = compile_trim_rules("[date][number][letter]")
>>> apply_trim("03/04/2023 12345 AB JOHN SMITH LTD", rules, TrimMode.START_TO_MATCH)
'JOHN SMITH LTD'
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from .canonical import collapse_whitespace
from .errors import MalformedRuleError
from .logging_setup import get_logger

_logger = get_logger("statement_entities.trim_rules")

_MONTHS = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*"

DATE_PATTERN = (
    r"(?:\b\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}\b"
    rf"|\b\d{{1,2}}\s*{_MONTHS}(?:\s*\d{{2,4}})?\b"
    rf"|\b{_MONTHS}\s+\d{{2,4}}\b"
    r"|\b\d{6}\b)"
)
NUMBER_PATTERN = r"\b\d+\b"
LETTER_PATTERN = r"\b[A-Za-z0-9\-]{1,5}\b"
MIX_PATTERN = r"\b[A-Za-z0-9]+\b"
FUZZY_DATE_PATTERN = rf"\d*{_MONTHS}\d*"

_RULE_SPLIT_RE = re.compile(r"\r?\n|\||\s+OR\s+")
_BRACKET_RE = re.compile(r"\[(.*?)\]")
_WS_RE = re.compile(r"\s+")
_TOKEN_GAP = r"\s*"


class TrimMode(str, Enum):
    """Which part of a description survives a rule match."""

    START_TO_MATCH = "START_TO_MATCH"  # keep the text after the match
    MATCH_ONLY = "MATCH_ONLY"  # drop just the match
    MATCH_TO_END = "MATCH_TO_END"  # keep the text before the match


class TokenKind(str, Enum):
    DATE = "date"
    NUMBER = "number"
    LETTER = "letter"
    MIX = "mix"
    FUZZY_DATE = "fuzzy date"
    LITERAL = "literal"
    UNKNOWN_AS_LITERAL = "unknown"


_PLACEHOLDERS: dict[str, TokenKind] = {
    "date": TokenKind.DATE,
    "number": TokenKind.NUMBER,
    "numbers": TokenKind.NUMBER,
    "letter": TokenKind.LETTER,
    "mix": TokenKind.MIX,
    "fuzzy date": TokenKind.FUZZY_DATE,
}

_PLACEHOLDER_PATTERNS: dict[TokenKind, str] = {
    TokenKind.DATE: DATE_PATTERN,
    TokenKind.NUMBER: NUMBER_PATTERN,
    TokenKind.LETTER: LETTER_PATTERN,
    TokenKind.MIX: MIX_PATTERN,
    TokenKind.FUZZY_DATE: FUZZY_DATE_PATTERN,
}


@dataclass(frozen=True, slots=True)
class RuleToken:
    kind: TokenKind
    text: str = ""


@dataclass(frozen=True, slots=True)
class CompiledRule:
    pattern: re.Pattern[str]
    source: str


@dataclass(frozen=True, slots=True)
class CompiledRuleSet:
    """Ordered, immutable set of compiled trim rules.

    An empty set is valid and leaves every description untouched.
    """

    rules: tuple[CompiledRule, ...] = ()

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[CompiledRule]:
        return iter(self.rules)

    def __bool__(self) -> bool:
        return bool(self.rules)

    @property
    def sources(self) -> tuple[str, ...]:
        return tuple(r.source for r in self.rules)


@dataclass(frozen=True, slots=True)
class TrimPreview:
    original: str
    result: str
    matched: str = ""

    @property
    def changed(self) -> bool:
        return self.original != self.result


# ---------------------------------------------------------------------------
# Parsing and compilation
# ---------------------------------------------------------------------------


def split_rules(rule_text: str) -> list[str]:
    """Split rule text into trimmed, non-empty rule strings in file order."""

    return [r.strip() for r in _RULE_SPLIT_RE.split(rule_text or "") if r.strip()]


def _bracket_token(content: str) -> RuleToken:
    key = content.strip().lower()
    kind = _PLACEHOLDERS.get(key)
    if kind is not None:
        return RuleToken(kind)
    if len(content) >= 2 and content.startswith('"') and content.endswith('"'):
        return RuleToken(TokenKind.LITERAL, content[1:-1])
    return RuleToken(TokenKind.UNKNOWN_AS_LITERAL, f"[{content}]")


def tokenize_rule(rule: str) -> list[RuleToken]:
    """Split one rule into placeholder and literal tokens.

    Whitespace-only literal runs between placeholders are dropped; the
    compiler joins tokens with optional whitespace anyway.
    """

    tokens: list[RuleToken] = []
    last = 0
    for m in _BRACKET_RE.finditer(rule):
        before = rule[last : m.start()].strip()
        if before:
            tokens.append(RuleToken(TokenKind.LITERAL, before))
        tokens.append(_bracket_token(m.group(1)))
        last = m.end()
    rest = rule[last:].strip()
    if rest:
        tokens.append(RuleToken(TokenKind.LITERAL, rest))
    return tokens


def _literal_pattern(text: str) -> str:
    parts = [re.escape(p) for p in _WS_RE.split(text.strip()) if p]
    return _TOKEN_GAP.join(parts)


def _token_pattern(token: RuleToken) -> str:
    match token.kind:
        case TokenKind.LITERAL | TokenKind.UNKNOWN_AS_LITERAL:
            return _literal_pattern(token.text)
        case _:
            return _PLACEHOLDER_PATTERNS[token.kind]


def compile_rule(rule: str) -> CompiledRule:
    """Compile a single rule; raise :class:`MalformedRuleError` on failure."""

    pieces = [p for p in (_token_pattern(t) for t in tokenize_rule(rule)) if p]
    if not pieces:
        raise MalformedRuleError(rule, "rule has no matchable content")
    try:
        pattern = re.compile(_TOKEN_GAP.join(pieces), re.IGNORECASE)
    except re.error as exc:
        raise MalformedRuleError(rule, str(exc)) from exc
    return CompiledRule(pattern=pattern, source=rule)


def compile_trim_rules(rule_text: str) -> CompiledRuleSet:
    """Compile rule text into a :class:`CompiledRuleSet`. Never raises.

    Rules that fail to compile are logged and dropped; the remaining rules
    keep their relative order.
    """

    compiled: list[CompiledRule] = []
    for rule in split_rules(rule_text):
        try:
            compiled.append(compile_rule(rule))
        except MalformedRuleError as exc:
            _logger.debug("dropping trim rule: %s", exc)
    return CompiledRuleSet(tuple(compiled))


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def _trim_once(text: str, rule_set: CompiledRuleSet, mode: TrimMode) -> tuple[str, str]:
    """Return ``(result, matched_text)`` for the first matching rule."""

    for rule in rule_set:
        m = rule.pattern.search(text)
        if m is None:
            continue
        if mode is TrimMode.START_TO_MATCH:
            result = text[m.end() :]
        elif mode is TrimMode.MATCH_TO_END:
            result = text[: m.start()]
        else:
            result = f"{text[: m.start()]} {text[m.end() :]}"
        result = collapse_whitespace(result)
        return (result or text), m.group(0)
    return text, ""


def apply_trim(text: str, rule_set: CompiledRuleSet, mode: TrimMode | str) -> str:
    """Apply the first matching rule of ``rule_set`` to ``text``.

    Returns ``text`` unchanged when no rule matches, and also when trimming
    would leave nothing behind.
    """

    return _trim_once(text or "", rule_set, TrimMode(mode))[0]


def preview_trim(
    items: Iterable[str],
    rule_set: CompiledRuleSet,
    mode: TrimMode | str,
    *,
    limit: int | None = 5000,
) -> list[TrimPreview]:
    """Preview :func:`apply_trim` over distinct ``items`` in input order."""

    resolved = TrimMode(mode)
    out: list[TrimPreview] = []
    seen: set[str] = set()
    for item in items:
        text = item or ""
        if text in seen:
            continue
        seen.add(text)
        result, matched = _trim_once(text, rule_set, resolved)
        out.append(TrimPreview(original=text, result=result, matched=matched))
        if limit is not None and len(out) >= limit:
            break
    return out


__all__ = [
    "CompiledRule",
    "CompiledRuleSet",
    "RuleToken",
    "TokenKind",
    "TrimMode",
    "TrimPreview",
    "apply_trim",
    "compile_rule",
    "compile_trim_rules",
    "preview_trim",
    "split_rules",
    "tokenize_rule",
]
