"""Data models for ``statement_entities``.

Rows handed to the engine come from an external extraction step (OCR/AI
table extraction or a spreadsheet import). Their cells are strings; amounts
are parsed leniently with :func:`parse_amount` so a smudged cell counts as
zero rather than failing a whole bulk operation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

_ZERO = Decimal("0")
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]+")
_LEADING_NUMBER_RE = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")

# ---------------------------------------------------------------------------
# Amount helpers
# ---------------------------------------------------------------------------


def parse_amount(raw: Any) -> Decimal:
    """Parse an amount cell, returning ``Decimal(0)`` when unparsable.

    Currency symbols, thousands separators and other decoration are dropped,
    then the leading number is read and anything after it ignored:

    - ``"£1,234.50"`` -> ``Decimal("1234.50")``
    - ``"12.50-"`` (trailing-minus debit) -> ``Decimal("12.50")``
    - ``"12.50 DR"`` -> ``Decimal("12.50")``
    """

    if raw is None:
        return _ZERO
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else _ZERO
    if isinstance(raw, bool):
        return _ZERO
    if isinstance(raw, int | float):
        try:
            d = Decimal(str(raw))
        except InvalidOperation:
            return _ZERO
        return d if d.is_finite() else _ZERO
    match = _LEADING_NUMBER_RE.match(_NON_NUMERIC_RE.sub("", str(raw)))
    if match is None:
        return _ZERO
    try:
        d = Decimal(match.group(0))
    except InvalidOperation:
        return _ZERO
    return d if d.is_finite() else _ZERO


# ---------------------------------------------------------------------------
# Core records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawTransaction:
    """One extracted statement line. Identity is ``row_index``."""

    row_index: int
    date: str
    description: str
    amount_in: Decimal = _ZERO
    amount_out: Decimal = _ZERO

    @classmethod
    def from_cells(
        cls,
        row_index: int,
        *,
        date: Any = "",
        description: Any = "",
        amount_in: Any = None,
        amount_out: Any = None,
    ) -> RawTransaction:
        return cls(
            row_index=row_index,
            date=str(date or "").strip(),
            description=str(description or ""),
            amount_in=parse_amount(amount_in),
            amount_out=parse_amount(amount_out),
        )


@dataclass(frozen=True, slots=True)
class EntityGroup:
    """Derived per-entity view. Never a source of truth.

    ``members`` are the transactions whose description resolves to ``name``
    under the current mapping.
    """

    name: str
    category: str = ""
    type: str = ""
    comment: str = ""
    count: int = 0
    total_in: Decimal = _ZERO
    total_out: Decimal = _ZERO
    members: tuple[RawTransaction, ...] = field(default=())

    @property
    def net(self) -> Decimal:
        return self.total_in - self.total_out

    @property
    def descriptions(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(m.description for m in self.members))


@dataclass(frozen=True, slots=True)
class AlignmentRow:
    """A statement row as seen by the record aligner.

    Cells stay strings so repairs copy exactly what the second scan read.
    """

    date: str = ""
    description: str = ""
    amount_in: str = ""
    amount_out: str = ""
    type: str = ""

    @property
    def in_value(self) -> Decimal:
        return parse_amount(self.amount_in)

    @property
    def out_value(self) -> Decimal:
        return parse_amount(self.amount_out)

    @property
    def has_amount(self) -> bool:
        return self.in_value != 0 or self.out_value != 0


# ---------------------------------------------------------------------------
# Extraction DTOs
# ---------------------------------------------------------------------------


class ExtractedTable(BaseModel):
    """Header row plus string cells, as produced by the extraction step."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    headers: list[str]
    rows: list[list[str]]

    @field_validator("rows", mode="before")
    @classmethod
    def _stringify_cells(cls, v: Any) -> list[list[str]]:
        if v is None:
            return []
        return [["" if c is None else str(c) for c in row] for row in v]


__all__ = [
    "AlignmentRow",
    "EntityGroup",
    "ExtractedTable",
    "RawTransaction",
    "parse_amount",
]
