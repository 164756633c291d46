from decimal import Decimal

import pytest

from statement_entities.errors import InvalidMergeTarget
from statement_entities.models import RawTransaction
from statement_entities.trim_rules import TrimMode, compile_trim_rules
from statement_entities.workspace import EntityWorkspace

DESCRIPTIONS = [
    ("DIRECT DEBIT NETFLIX", "0", "9.99"),
    ("DD NETFLIX", "0", "9.99"),
    ("TESCO STORES 1234", "0", "12.50"),
    ("TESCO STORES 5678", "0", "30.00"),
    ("BGC/FPI REF:1234 JOHN SMITH", "100.00", "0"),
]


@pytest.fixture()
def workspace() -> EntityWorkspace:
    txs = [
        RawTransaction.from_cells(i, date="01/03/2024", description=d, amount_in=a_in, amount_out=a_out)
        for i, (d, a_in, a_out) in enumerate(DESCRIPTIONS)
    ]
    return EntityWorkspace(txs)


def _names(ws: EntityWorkspace) -> list[str]:
    return [g.name for g in ws.entity_groups()]


# ---- Mapping ---------------------------------------------------------------------


def test_default_mapping_is_canonicalized(workspace):
    assert workspace.get_entity_mapping("DD NETFLIX") == "NETFLIX"
    assert not workspace.has_override("DD NETFLIX")
    assert _names(workspace) == [
        "JOHN SMITH",
        "NETFLIX",
        "TESCO STORES 1234",
        "TESCO STORES 5678",
    ]


def test_entity_groups_aggregate_members(workspace):
    netflix = next(g for g in workspace.entity_groups() if g.name == "NETFLIX")
    assert netflix.count == 2
    assert netflix.total_out == Decimal("19.98")
    assert netflix.net == Decimal("-19.98")
    assert netflix.descriptions == ("DIRECT DEBIT NETFLIX", "DD NETFLIX")
    assert sum(g.count for g in workspace.entity_groups()) == len(DESCRIPTIONS)


def test_set_and_clear_override(workspace):
    workspace.set_entity_mapping("DD NETFLIX", " NFLX ")
    assert workspace.get_entity_mapping("DD NETFLIX") == "NFLX"
    assert workspace.has_override("DD NETFLIX")

    workspace.set_entity_mapping("DD NETFLIX", None)
    assert workspace.get_entity_mapping("DD NETFLIX") == "NETFLIX"
    assert workspace.mappings == {}


@pytest.mark.parametrize("bad", ["", "   "])
def test_blank_target_rejected_before_mutation(workspace, bad):
    workspace.set_entity_mapping("DD NETFLIX", "NFLX")
    with pytest.raises(InvalidMergeTarget):
        workspace.set_entity_mapping("DD NETFLIX", bad)
    assert workspace.get_entity_mapping("DD NETFLIX") == "NFLX"


def test_bulk_mapping_validates_every_target_first(workspace):
    with pytest.raises(InvalidMergeTarget):
        workspace.apply_mappings({"DD NETFLIX": "NFLX", "TESCO STORES 1234": ""})
    assert workspace.mappings == {}


def test_initial_mappings_are_validated():
    with pytest.raises(InvalidMergeTarget):
        EntityWorkspace([], mappings={"X": " "})


def test_clearing_override_leaves_annotations_until_pruned(workspace):
    workspace.set_entity_mapping("DD NETFLIX", "NFLX")
    workspace.set_category("NFLX", "Subscriptions")
    workspace.set_entity_mapping("DD NETFLIX", None)

    assert workspace.categories == {"NFLX": "Subscriptions"}
    assert workspace.prune_orphaned_annotations() == 1
    assert workspace.categories == {}


# ---- Bulk operations -------------------------------------------------------------


def test_annotations_follow_renamed_entities(workspace):
    workspace.set_category("TESCO STORES 1234", "Groceries")
    workspace.set_comment("TESCO STORES 1234", "weekly shop")

    carried = workspace.apply_mappings(
        {"TESCO STORES 1234": "TESCO", "TESCO STORES 5678": "TESCO"}
    )

    assert carried.categories == {"TESCO": "Groceries"}
    assert carried.comments == {"TESCO": "weekly shop"}
    tesco = next(g for g in workspace.entity_groups() if g.name == "TESCO")
    assert (tesco.count, tesco.category, tesco.comment) == (2, "Groceries", "weekly shop")


def test_existing_annotations_are_not_overwritten(workspace):
    workspace.set_category("TESCO STORES 1234", "Groceries")
    workspace.set_category("TESCO", "Food")
    workspace.apply_mappings({"TESCO STORES 1234": "TESCO"})
    assert workspace.categories["TESCO"] == "Food"


def test_carry_over_can_be_disabled(workspace):
    workspace.set_category("TESCO STORES 1234", "Groceries")
    carried = workspace.apply_mappings({"TESCO STORES 1234": "TESCO"}, carry_annotations=False)
    assert carried.categories == {}
    assert "TESCO" not in workspace.categories


def test_trim_commit_matches_preview(workspace):
    rules = compile_trim_rules("[number]")
    before = {raw: workspace.get_entity_mapping(raw) for raw, _, _ in DESCRIPTIONS}
    previews = {
        p.original: p.result for p in workspace.preview_trim_rules(rules, TrimMode.MATCH_ONLY)
    }

    applied = workspace.apply_trim_rules(rules, TrimMode.MATCH_ONLY)

    assert applied == {
        "TESCO STORES 1234": "TESCO STORES",
        "TESCO STORES 5678": "TESCO STORES",
    }
    for raw, name in before.items():
        assert workspace.get_entity_mapping(raw) == previews[name]
    assert _names(workspace) == ["JOHN SMITH", "NETFLIX", "TESCO STORES"]


def test_trim_skips_excluded_names(workspace):
    rules = compile_trim_rules("[number]")
    applied = workspace.apply_trim_rules(
        rules, TrimMode.MATCH_ONLY, exclude=["TESCO STORES 5678"]
    )
    assert applied == {"TESCO STORES 1234": "TESCO STORES"}


def test_trim_limited_to_selected_names(workspace):
    rules = compile_trim_rules("[number]")
    applied = workspace.apply_trim_rules(
        rules, TrimMode.MATCH_ONLY, names=["TESCO STORES 1234"]
    )
    assert applied == {"TESCO STORES 1234": "TESCO STORES"}


def test_merge_entities_with_category(workspace):
    count = workspace.merge_entities(
        "TESCO", ["TESCO STORES 1234", "TESCO STORES 5678"], category="Groceries"
    )
    assert count == 2
    tesco = next(g for g in workspace.entity_groups() if g.name == "TESCO")
    assert tesco.count == 2
    assert tesco.total_out == Decimal("42.50")
    assert tesco.category == "Groceries"


def test_merge_into_blank_target_rejected(workspace):
    with pytest.raises(InvalidMergeTarget):
        workspace.merge_entities(" ", ["NETFLIX"])
    assert workspace.mappings == {}


def test_apply_merge_suggestion(workspace):
    [suggestion] = workspace.find_duplicates()
    assert suggestion.names == ("TESCO STORES 1234", "TESCO STORES 5678")

    workspace.apply_merge_suggestion(suggestion)
    assert _names(workspace) == ["JOHN SMITH", "NETFLIX", "TESCO STORES 1234"]


def test_apply_clusters(workspace):
    clusters = workspace.build_clusters()
    assert [c.name for c in clusters] == ["TESCO STORES"]

    assert workspace.apply_clusters(clusters) == 2
    assert _names(workspace) == ["JOHN SMITH", "NETFLIX", "TESCO STORES"]


# ---- Clean / revert ------------------------------------------------------------


def test_auto_clean_uses_smart_keys_and_carries_category(workspace):
    workspace.set_category("TESCO STORES 1234", "Groceries")
    applied = workspace.auto_clean(["TESCO STORES 1234", "TESCO STORES 5678"])

    assert applied == {
        "TESCO STORES 1234": "TESCO STORES",
        "TESCO STORES 5678": "TESCO STORES",
    }
    assert _names(workspace) == ["JOHN SMITH", "NETFLIX", "TESCO STORES"]
    assert workspace.categories["TESCO STORES"] == "Groceries"


def test_auto_clean_falls_back_to_canonical_name_for_short_keys():
    tx = RawTransaction.from_cells(0, date="", description="DIRECT DEBIT 4321")
    ws = EntityWorkspace([tx], mappings={"DIRECT DEBIT 4321": "OLD"})
    assert ws.auto_clean() == {"DIRECT DEBIT 4321": "4321"}


def test_revert_names_restores_raw_descriptions(workspace):
    applied = workspace.revert_names(["NETFLIX"])

    assert applied == {
        "DIRECT DEBIT NETFLIX": "DIRECT DEBIT NETFLIX",
        "DD NETFLIX": "DD NETFLIX",
    }
    assert "NETFLIX" not in _names(workspace)
    assert workspace.get_entity_mapping("DD NETFLIX") == "DD NETFLIX"


def test_remove_text_is_case_insensitive(workspace):
    applied = workspace.remove_text("stores", ["TESCO STORES 1234"])
    assert applied == {"TESCO STORES 1234": "TESCO 1234"}


def test_remove_text_keeps_name_that_would_become_empty(workspace):
    assert workspace.remove_text("netflix", ["NETFLIX"]) == {}
    assert workspace.remove_text("   ") == {}
    assert "NETFLIX" in _names(workspace)


def test_strip_prefix_by_length_and_after_substring(workspace):
    assert workspace.strip_prefix(length=6, names=["TESCO STORES 1234"]) == {
        "TESCO STORES 1234": "STORES 1234"
    }
    # too long to cut: name unchanged
    assert workspace.strip_prefix(length=100, names=["TESCO STORES 5678"]) == {}
    assert workspace.strip_prefix(after="/", names=["JOHN SMITH"]) == {
        "BGC/FPI REF:1234 JOHN SMITH": "FPI REF:1234 JOHN SMITH"
    }


def test_strip_prefix_needs_exactly_one_option(workspace):
    with pytest.raises(ValueError):
        workspace.strip_prefix()
    with pytest.raises(ValueError):
        workspace.strip_prefix(length=2, after="X")


@pytest.mark.parametrize(
    ("mode", "expected"),
    [
        ("SENTENCE", "John smith"),
        ("LOWER", "john smith"),
        ("TITLE", "John Smith"),
        ("TOGGLE", "john smith"),
    ],
)
def test_change_case(workspace, mode, expected):
    applied = workspace.change_case(mode, ["JOHN SMITH"])
    assert applied == {"BGC/FPI REF:1234 JOHN SMITH": expected}


def test_change_case_noop_and_bad_mode(workspace):
    assert workspace.change_case("UPPER", ["JOHN SMITH"]) == {}
    with pytest.raises(ValueError):
        workspace.change_case("sideways", ["JOHN SMITH"])


# ---- Annotations -----------------------------------------------------------------


def test_auto_populate_types_respects_explicit_types(workspace):
    workspace.set_type("JOHN SMITH", "SAL")
    assigned = workspace.auto_populate_types()

    assert assigned == {"NETFLIX": "DD"}
    assert workspace.types == {"JOHN SMITH": "SAL", "NETFLIX": "DD"}


def test_blank_annotation_clears(workspace):
    workspace.set_comment("NETFLIX", "cancel?")
    workspace.set_comment("NETFLIX", "  ")
    assert workspace.comments == {}
