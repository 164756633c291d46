"""Bridge between extracted tables and the engine's row types.

Extraction output is a header row plus string cells. Columns are located by
header name (``Date``, ``Description``/``Details``/``Payee`` …, ``Money In``,
``Money Out``, ``Type``) so tables from different banks and scans line up
without an explicit column mapping.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .alignment import AlignmentResult, RecordAligner
from .logging_setup import get_logger
from .models import AlignmentRow, ExtractedTable, RawTransaction
from .settings import AlignmentWeights

_logger = get_logger("statement_entities.tables")

DATE_HEADER_RE = re.compile(r"date", re.IGNORECASE)
DESCRIPTION_HEADER_RE = re.compile(
    r"desc|details|payee|narrative|memo|transaction|particulars|row\s?label|account|reference",
    re.IGNORECASE,
)
# Narrower set used when matching two scans against each other.
SCAN_DESCRIPTION_HEADER_RE = re.compile(
    r"desc|details|payee|narrative|memo|transaction", re.IGNORECASE
)
IN_HEADER_RE = re.compile(r"credit|money\s?in|deposit|receipt|paid\s?in|\bin\b", re.IGNORECASE)
OUT_HEADER_RE = re.compile(
    r"debit|money\s?out|withdrawal|payment|paid\s?out|\bout\b", re.IGNORECASE
)
TYPE_HEADER_RE = re.compile(r"type|code", re.IGNORECASE)

MAX_DESCRIPTION_LENGTH = 50


@dataclass(frozen=True, slots=True)
class ColumnLayout:
    """Column positions found in a header row; ``None`` when absent."""

    date: int | None = None
    description: int | None = None
    amount_in: int | None = None
    amount_out: int | None = None
    type: int | None = None


def find_column(
    headers: Sequence[str], pattern: re.Pattern[str], *, exclude: Iterable[int] = ()
) -> int | None:
    skip = set(exclude)
    for i, h in enumerate(headers):
        if i not in skip and pattern.search(h or ""):
            return i
    return None


def detect_columns(
    headers: Sequence[str], *, description_pattern: re.Pattern[str] = DESCRIPTION_HEADER_RE
) -> ColumnLayout:
    """Locate the known columns; each header is claimed at most once, in the
    order date, description, in, out, type."""

    found: dict[str, int | None] = {}
    for name, pattern in (
        ("date", DATE_HEADER_RE),
        ("description", description_pattern),
        ("amount_in", IN_HEADER_RE),
        ("amount_out", OUT_HEADER_RE),
        ("type", TYPE_HEADER_RE),
    ):
        taken = [i for i in found.values() if i is not None]
        found[name] = find_column(headers, pattern, exclude=taken)
    return ColumnLayout(**found)


def _cell(row: Sequence[str], idx: int | None) -> str:
    if idx is None or idx >= len(row):
        return ""
    return row[idx] or ""


def rows_from_table(table: ExtractedTable, layout: ColumnLayout) -> list[AlignmentRow]:
    return [
        AlignmentRow(
            date=_cell(r, layout.date),
            description=_cell(r, layout.description),
            amount_in=_cell(r, layout.amount_in),
            amount_out=_cell(r, layout.amount_out),
            type=_cell(r, layout.type),
        )
        for r in table.rows
    ]


def transactions_from_table(table: ExtractedTable) -> list[RawTransaction]:
    """Convert table rows into :class:`RawTransaction` records (row order kept)."""

    layout = detect_columns(table.headers)
    return [
        RawTransaction.from_cells(
            i,
            date=_cell(r, layout.date),
            description=_cell(r, layout.description),
            amount_in=_cell(r, layout.amount_in),
            amount_out=_cell(r, layout.amount_out),
        )
        for i, r in enumerate(table.rows)
    ]


def truncate_descriptions(
    table: ExtractedTable, max_length: int = MAX_DESCRIPTION_LENGTH
) -> ExtractedTable:
    """Cap description cells at ``max_length`` characters."""

    idx = detect_columns(table.headers).description
    if idx is None:
        return table
    rows = [
        [c[:max_length] if i == idx else c for i, c in enumerate(row)] for row in table.rows
    ]
    return ExtractedTable(headers=list(table.headers), rows=rows)


def align_tables_with_outcomes(
    current: ExtractedTable,
    scan: ExtractedTable,
    fixed_indices: Iterable[int],
    *,
    weights: AlignmentWeights | None = None,
) -> tuple[ExtractedTable, AlignmentResult | None]:
    """Like :func:`align_tables` but also return the alignment result.

    The result is ``None`` when either table lacks a description column.
    """

    cur_layout = detect_columns(current.headers, description_pattern=SCAN_DESCRIPTION_HEADER_RE)
    scan_layout = detect_columns(scan.headers, description_pattern=SCAN_DESCRIPTION_HEADER_RE)
    if cur_layout.description is None or scan_layout.description is None:
        _logger.info("alignment skipped: no description column in one of the tables")
        return current, None

    result = RecordAligner(weights).align(
        fixed_indices, rows_from_table(current, cur_layout), rows_from_table(scan, scan_layout)
    )

    new_rows = [list(r) for r in current.rows]
    for outcome in result.outcomes:
        if not outcome.updated_fields:
            continue
        repaired = result.rows[outcome.row_index]
        row = new_rows[outcome.row_index]
        for name in outcome.updated_fields:
            col = getattr(cur_layout, name)
            if col is None:
                continue
            if col >= len(row):
                row.extend([""] * (col + 1 - len(row)))
            row[col] = getattr(repaired, name)
    return ExtractedTable(headers=list(current.headers), rows=new_rows), result


def align_tables(
    current: ExtractedTable,
    scan: ExtractedTable,
    fixed_indices: Iterable[int],
    *,
    weights: AlignmentWeights | None = None,
) -> ExtractedTable:
    """Repair flagged rows of ``current`` from ``scan``; inputs are untouched.

    Returns ``current`` itself when either table has no description column.
    """

    return align_tables_with_outcomes(current, scan, fixed_indices, weights=weights)[0]


# ---------------------------------------------------------------------------
# CSV I/O (CLI convenience)
# ---------------------------------------------------------------------------


def read_table_csv(path: str | Path) -> ExtractedTable:
    """Read a CSV with a header row. Raises ``csv.Error`` when it has none."""

    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.reader(f)
        headers = next(reader, None)
        if headers is None:
            raise csv.Error(f"CSV appears to have no header row: {path}")
        rows = [row for row in reader if any(c.strip() for c in row)]
    return ExtractedTable(headers=headers, rows=rows)


def write_table_csv(table: ExtractedTable, path: str | Path) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(table.headers)
        writer.writerows(table.rows)


__all__ = [
    "ColumnLayout",
    "align_tables",
    "align_tables_with_outcomes",
    "detect_columns",
    "find_column",
    "read_table_csv",
    "rows_from_table",
    "transactions_from_table",
    "truncate_descriptions",
    "write_table_csv",
]
