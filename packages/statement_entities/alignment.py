"""Repair flagged statement rows from a second scan of the same pages.

A "fix list" of flagged row indices is matched, in ascending order, against
the rows of a fresh capture. Each flagged row may only match a scan row after
the previous accepted match, which keeps the repaired rows in statement
order. The search is greedy: it is sized for a handful of flagged rows and
does not look for a globally optimal alignment.

Scoring per candidate (defaults from :class:`AlignmentWeights`):

- dates: equal +30, both present but different -50, only the scan has one +5
- amounts: both present and in/out agree within 0.05 +40, both present but
  different -40, only the scan has one +20, only the target has one -10
- description similarity (0-100) x 0.3
- position: ``window - distance`` for the first ``window`` candidates after
  the previous match

The best candidate is accepted only when its score exceeds the threshold
(20). Rows without a confident match are left as they were.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from .logging_setup import get_logger
from .models import AlignmentRow
from .settings import AlignmentWeights

_logger = get_logger("statement_entities.alignment")

_TOKEN_SPLIT_RE = re.compile(r"\W+")
_MIN_TOKEN_LENGTH = 3


def _tokens(text: str) -> set[str]:
    return {t for t in _TOKEN_SPLIT_RE.split(text) if len(t) >= _MIN_TOKEN_LENGTH}


def description_similarity(a: str | None, b: str | None) -> float:
    """Score how alike two descriptions are, from 0 to 100.

    Case-insensitive after trimming: identical is 100, containment is 80,
    otherwise the share of shared words (longer than two characters) over the
    larger word set. Symmetric in its arguments.
    """

    x = (a or "").strip().lower()
    y = (b or "").strip().lower()
    if not x or not y:
        return 0.0
    if x == y:
        return 100.0
    if x in y or y in x:
        return 80.0
    tokens_x, tokens_y = _tokens(x), _tokens(y)
    if not tokens_x or not tokens_y:
        return 0.0
    return 100.0 * len(tokens_x & tokens_y) / max(len(tokens_x), len(tokens_y))


@dataclass(frozen=True, slots=True)
class AlignmentOutcome:
    """What happened to one flagged row.

    ``matched_scan_index`` is ``None`` when no candidate cleared the
    threshold; that is a normal result, not an error.
    """

    row_index: int
    matched_scan_index: int | None = None
    updated_fields: tuple[str, ...] = ()
    score: float | None = None

    @property
    def matched(self) -> bool:
        return self.matched_scan_index is not None


@dataclass(frozen=True, slots=True)
class AlignmentResult:
    rows: list[AlignmentRow]
    outcomes: tuple[AlignmentOutcome, ...]

    @property
    def accepted_scan_indices(self) -> list[int]:
        return [o.matched_scan_index for o in self.outcomes if o.matched_scan_index is not None]


class RecordAligner:
    """Greedy, monotonic matcher between flagged rows and a second scan."""

    def __init__(self, weights: AlignmentWeights | None = None) -> None:
        self.weights = weights or AlignmentWeights()
        self._tolerance = Decimal(str(self.weights.amount_tolerance))

    def score(self, target: AlignmentRow, candidate: AlignmentRow, distance: int) -> float:
        """Score ``candidate`` for ``target``; ``distance`` is the offset from
        the start of the current search window."""

        w = self.weights
        total = 0.0

        target_date, scan_date = target.date.strip(), candidate.date.strip()
        if target_date and scan_date:
            total += w.date_match if target_date == scan_date else w.date_mismatch
        elif scan_date:
            total += w.date_fill

        target_has, scan_has = target.has_amount, candidate.has_amount
        if target_has and scan_has:
            same_in = abs(target.in_value - candidate.in_value) < self._tolerance
            same_out = abs(target.out_value - candidate.out_value) < self._tolerance
            total += w.amount_match if same_in and same_out else w.amount_mismatch
        elif scan_has:
            total += w.amount_fill
        elif target_has:
            total += w.amount_missing

        total += description_similarity(target.description, candidate.description) * w.description_weight

        if distance < w.proximity_window:
            total += w.proximity_window - distance
        return total

    def _repair(self, target: AlignmentRow, source: AlignmentRow) -> tuple[AlignmentRow, tuple[str, ...]]:
        changes: dict[str, str] = {}

        new_desc = source.description or ""
        # Never downgrade to a shorter reading.
        if len(new_desc) >= len(target.description or ""):
            truncated = new_desc[: self.weights.max_description_length]
            if truncated != target.description:
                changes["description"] = truncated

        if target.in_value == 0 and target.out_value == 0:
            if source.amount_in != target.amount_in:
                changes["amount_in"] = source.amount_in
            if source.amount_out != target.amount_out:
                changes["amount_out"] = source.amount_out

        if not target.type.strip() and source.type.strip():
            changes["type"] = source.type

        if not changes:
            return target, ()
        return replace(target, **changes), tuple(changes)

    def align(
        self,
        fixed_indices: Iterable[int],
        target_rows: Sequence[AlignmentRow],
        scan_rows: Sequence[AlignmentRow],
    ) -> AlignmentResult:
        """Match flagged rows against ``scan_rows`` and return repaired copies.

        Inputs are never mutated. Duplicate and out-of-range indices are
        ignored.
        """

        rows = list(target_rows)
        requested = list(fixed_indices)
        flagged = sorted({i for i in requested if 0 <= i < len(rows)})
        if len(flagged) != len(requested):
            _logger.debug(
                "ignoring %d duplicate or out-of-range row indices",
                len(requested) - len(flagged),
            )
        outcomes: list[AlignmentOutcome] = []
        last_match = -1

        for idx in flagged:
            target = rows[idx]
            start = last_match + 1
            best_index = -1
            best_score = float("-inf")
            for s_idx in range(start, len(scan_rows)):
                sc = self.score(target, scan_rows[s_idx], s_idx - start)
                if sc > best_score:
                    best_score, best_index = sc, s_idx

            if best_index == -1 or best_score <= self.weights.accept_threshold:
                _logger.debug(
                    "row %d: no confident match (best %s)",
                    idx,
                    None if best_index == -1 else round(best_score, 2),
                )
                outcomes.append(
                    AlignmentOutcome(row_index=idx, score=None if best_index == -1 else best_score)
                )
                continue

            repaired, fields = self._repair(target, scan_rows[best_index])
            rows[idx] = repaired
            last_match = best_index
            _logger.debug(
                "row %d: matched scan row %d (score %.2f, updated %s)",
                idx,
                best_index,
                best_score,
                ",".join(fields) or "-",
            )
            outcomes.append(
                AlignmentOutcome(
                    row_index=idx,
                    matched_scan_index=best_index,
                    updated_fields=fields,
                    score=best_score,
                )
            )

        matched = sum(1 for o in outcomes if o.matched)
        _logger.info("alignment: %d of %d flagged rows matched", matched, len(flagged))
        return AlignmentResult(rows=rows, outcomes=tuple(outcomes))


def align_and_repair(
    fixed_indices: Iterable[int],
    target_rows: Sequence[AlignmentRow],
    scan_rows: Sequence[AlignmentRow],
    *,
    weights: AlignmentWeights | None = None,
) -> list[AlignmentRow]:
    """Return a new row list with flagged rows repaired from ``scan_rows``."""

    return RecordAligner(weights).align(fixed_indices, target_rows, scan_rows).rows


__all__ = [
    "AlignmentOutcome",
    "AlignmentResult",
    "RecordAligner",
    "align_and_repair",
    "description_similarity",
]
