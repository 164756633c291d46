"""Error types raised by ``statement_entities``.

Only :class:`InvalidMergeTarget` ever reaches callers. :class:`MalformedRuleError`
is raised while compiling a single trim rule and is recovered inside
:func:`statement_entities.trim_rules.compile_trim_rules`.
"""

from __future__ import annotations


class StatementEntitiesError(Exception):
    """Base class for package errors."""


class MalformedRuleError(StatementEntitiesError, ValueError):
    """A trim rule line could not be compiled into a pattern."""

    def __init__(self, rule: str, reason: str) -> None:
        super().__init__(f"cannot compile trim rule {rule!r}: {reason}")
        self.rule = rule
        self.reason = reason


class InvalidMergeTarget(StatementEntitiesError, ValueError):
    """A mapping mutation was given an empty or blank canonical name."""

    def __init__(self, raw: str, target: object) -> None:
        super().__init__(f"invalid canonical name {target!r} for {raw!r}")
        self.raw = raw
        self.target = target


__all__ = ["StatementEntitiesError", "MalformedRuleError", "InvalidMergeTarget"]
