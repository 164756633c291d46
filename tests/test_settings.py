import pytest
from pydantic import ValidationError

from statement_entities.settings import (
    AlignmentWeights,
    DuplicateSettings,
    EngineSettings,
    load_settings,
)


def test_defaults():
    s = EngineSettings()
    assert s.alignment.accept_threshold == 20
    assert s.alignment.date_mismatch == -50
    assert s.alignment.description_weight == pytest.approx(0.3)
    assert s.duplicates.similarity_threshold == pytest.approx(0.8)
    assert s.duplicates.key_prefix_min_chars == 6
    assert s.cluster_min_overlap == 3
    assert load_settings({}) == s


def test_env_overrides():
    s = load_settings(
        {
            "SE_ALIGN_ACCEPT_THRESHOLD": "25",
            "SE_ALIGN_PROXIMITY_WINDOW": " 3 ",
            "SE_DUPLICATE_KEY_PREFIX_MIN_CHARS": "",
            "SE_CLUSTER_MIN_OVERLAP": "4",
            "UNRELATED": "x",
        }
    )
    assert s.alignment.accept_threshold == 25
    assert s.alignment.proximity_window == 3
    assert s.duplicates.key_prefix_min_chars is None
    assert s.cluster_min_overlap == 4


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("SE_DUPLICATE_SIMILARITY_THRESHOLD", "0.9")
    assert load_settings().duplicates.similarity_threshold == pytest.approx(0.9)


@pytest.mark.parametrize(
    "env",
    [
        {"SE_ALIGN_PROXIMITY_WINDOW": "abc"},
        {"SE_DUPLICATE_SIMILARITY_THRESHOLD": "1.5"},
        {"SE_CLUSTER_MIN_OVERLAP": "0"},
    ],
)
def test_invalid_overrides_raise(env):
    with pytest.raises(ValidationError):
        load_settings(env)


def test_models_are_frozen_and_strict():
    with pytest.raises(ValidationError):
        AlignmentWeights(bogus=1)
    weights = AlignmentWeights()
    with pytest.raises(ValidationError):
        weights.accept_threshold = 5
    with pytest.raises(ValidationError):
        DuplicateSettings(key_prefix_min_chars=0)
