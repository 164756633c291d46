import pytest

from statement_entities.alignment import (
    RecordAligner,
    align_and_repair,
    description_similarity,
)
from statement_entities.models import AlignmentRow
from statement_entities.settings import AlignmentWeights


def _row(date="", description="", amount_in="", amount_out="", type=""):
    return AlignmentRow(
        date=date,
        description=description,
        amount_in=amount_in,
        amount_out=amount_out,
        type=type,
    )


# ---- Fixtures ------------------------------------------------------------------


@pytest.fixture()
def target_rows() -> list[AlignmentRow]:
    return [
        _row("01/03/2024", "TESCO STORES", amount_out="12.50", type="CARD"),
        _row("02/03/2024", "SHEL"),
        _row("05/03/2024", "NETFLIX.COM", amount_out="9.99"),
        _row("07/03/2024", "AMAZ"),
    ]


@pytest.fixture()
def scan_rows() -> list[AlignmentRow]:
    return [
        _row("01/03/2024", "TESCO STORES", amount_out="12.50", type="CARD"),
        _row("02/03/2024", "SHELL OIL 1234", amount_out="40.00", type="CARD"),
        _row("05/03/2024", "NETFLIX.COM", amount_out="9.99", type="DD"),
        _row("07/03/2024", "AMAZON MKTPLACE", amount_out="23.10", type="CARD"),
    ]


# ---- description_similarity ----------------------------------------------------


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ("Tesco", " TESCO ", 100.0),
        ("SHEL", "SHELL OIL", 80.0),
        ("", "TESCO", 0.0),
        (None, None, 0.0),
        ("NO OVERLAP", "AT ALL", 0.0),
    ],
)
def test_description_similarity(a, b, expected):
    assert description_similarity(a, b) == expected
    assert description_similarity(b, a) == expected


def test_description_similarity_token_share_is_symmetric():
    a, b = "TESCO STORES LONDON", "TESCO EXPRESS LONDON"
    assert description_similarity(a, b) == pytest.approx(200 / 3)
    assert description_similarity(a, b) == description_similarity(b, a)


# ---- RecordAligner -------------------------------------------------------------


def test_flagged_rows_repaired_from_scan(target_rows, scan_rows):
    result = RecordAligner().align([1, 3], target_rows, scan_rows)

    assert result.accepted_scan_indices == [1, 3]
    assert result.rows[1] == _row("02/03/2024", "SHELL OIL 1234", amount_out="40.00", type="CARD")
    assert result.rows[3].description == "AMAZON MKTPLACE"
    assert result.outcomes[0].updated_fields == ("description", "amount_out", "type")
    # untouched rows are passed through as-is
    assert result.rows[0] is target_rows[0]
    assert result.rows[2] is target_rows[2]


def test_inputs_are_not_mutated(target_rows, scan_rows):
    before = list(target_rows)
    align_and_repair([1, 3], target_rows, scan_rows)
    assert target_rows == before


def test_accepted_scan_indices_strictly_increase():
    targets = [_row("02/03/2024", "SHELL"), _row("01/03/2024", "TESCO")]
    scan = [
        _row("01/03/2024", "TESCO STORES", amount_out="12.50"),
        _row("02/03/2024", "SHELL OIL", amount_out="40.00"),
    ]
    result = RecordAligner().align([0, 1], targets, scan)

    assert result.outcomes[0].matched_scan_index == 1
    assert not result.outcomes[1].matched
    assert result.outcomes[1].score is None
    assert result.rows[1] is targets[1]
    indices = result.accepted_scan_indices
    assert indices == sorted(set(indices))


def test_longer_existing_description_is_kept():
    target = _row("02/03/2024", "SHELL OIL PLC LONDON", amount_out="40.00")
    scan = [_row("02/03/2024", "SHELL", amount_out="40.00")]
    result = RecordAligner().align([0], [target], scan)

    assert result.outcomes[0].matched
    assert result.outcomes[0].updated_fields == ()
    assert result.rows[0].description == "SHELL OIL PLC LONDON"


def test_existing_amounts_are_not_overwritten():
    target = _row("02/03/2024", "SHELL OIL", amount_out="12.00")
    scan = [_row("02/03/2024", "SHELL OIL", amount_out="13.00")]
    result = RecordAligner().align([0], [target], scan)

    # 30 date - 40 amount + 30 description + 5 position
    assert result.outcomes[0].score == pytest.approx(25)
    assert result.rows[0].amount_out == "12.00"


def test_no_confident_match_leaves_row_unchanged():
    target = _row("01/01/2024", "XYZ", amount_out="5.00")
    scan = [_row("09/09/2024", "ABC", amount_out="99.00")]
    result = RecordAligner().align([0], [target], scan)

    assert result.outcomes[0].matched_scan_index is None
    assert result.outcomes[0].score == pytest.approx(-85)
    assert result.rows == [target]


def test_repaired_description_is_truncated():
    target = _row("02/03/2024", "")
    scan = [_row("02/03/2024", "X" * 60, amount_out="1.00")]
    [row] = align_and_repair([0], [target], scan)
    assert row.description == "X" * 50


def test_duplicate_and_out_of_range_indices_ignored(target_rows, scan_rows):
    result = RecordAligner().align([1, 1, 99, -1], target_rows, scan_rows)
    assert [o.row_index for o in result.outcomes] == [1]


def test_threshold_comes_from_weights(target_rows, scan_rows):
    strict = AlignmentWeights(accept_threshold=100)
    result = RecordAligner(strict).align([1], target_rows, scan_rows)
    assert not result.outcomes[0].matched
    assert result.rows == target_rows


def test_trailing_minus_amount_counts_as_present():
    target = _row("02/03/2024", "SHELL OIL", amount_out="12.50-")
    scan = [_row("02/03/2024", "SHELL OIL", amount_out="99.00")]
    result = RecordAligner().align([0], [target], scan)

    assert result.outcomes[0].matched
    assert result.rows[0].amount_out == "12.50-"


# ---- Scoring branches ----------------------------------------------------------


def test_score_date_fill():
    # +5 date fill, +30 identical description, +5 position
    score = RecordAligner().score(_row("", "TESCO"), _row("01/03/2024", "TESCO"), 0)
    assert score == pytest.approx(40)


def test_score_amount_fill_and_missing():
    aligner = RecordAligner()
    fill = aligner.score(_row(), _row(amount_out="5.00"), 0)
    missing = aligner.score(_row(amount_out="5.00"), _row(), 0)
    assert fill == pytest.approx(20 + 5)
    assert missing == pytest.approx(-10 + 5)


@pytest.mark.parametrize(("distance", "bonus"), [(0, 5), (1, 4), (4, 1), (5, 0), (9, 0)])
def test_score_position_bonus_shrinks_with_distance(distance, bonus):
    assert RecordAligner().score(_row(), _row(), distance) == pytest.approx(bonus)
