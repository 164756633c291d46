"""Tunable constants for matching and alignment.

Defaults are the hand-picked values the engine has always used; none of them
are derived. Each can be overridden from the environment:

- ``SE_ALIGN_<FIELD>`` for :class:`AlignmentWeights` fields, e.g.
  ``SE_ALIGN_ACCEPT_THRESHOLD=25``
- ``SE_DUPLICATE_<FIELD>`` for :class:`DuplicateSettings` fields; an empty
  ``SE_DUPLICATE_KEY_PREFIX_MIN_CHARS`` disables the smart-key prefix rule
- ``SE_CLUSTER_MIN_OVERLAP`` for the cluster containment threshold
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_ALIGN_PREFIX = "SE_ALIGN_"
_DUPLICATE_PREFIX = "SE_DUPLICATE_"
_CLUSTER_ENV = "SE_CLUSTER_MIN_OVERLAP"


class AlignmentWeights(BaseModel):
    """Score weights for :class:`statement_entities.alignment.RecordAligner`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    date_match: float = 30
    date_mismatch: float = -50
    date_fill: float = 5
    amount_match: float = 40
    amount_mismatch: float = -40
    amount_fill: float = 20
    amount_missing: float = -10
    amount_tolerance: float = Field(default=0.05, ge=0)
    description_weight: float = 0.3
    proximity_window: int = Field(default=5, ge=0)
    accept_threshold: float = 20
    max_description_length: int = Field(default=50, ge=1)


class DuplicateSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    similarity_threshold: float = Field(default=0.8, ge=0, le=1)
    containment_threshold: float = Field(default=0.6, ge=0, le=1)
    key_prefix_min_chars: int | None = Field(default=6, ge=1)


class EngineSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    alignment: AlignmentWeights = AlignmentWeights()
    duplicates: DuplicateSettings = DuplicateSettings()
    cluster_min_overlap: int = Field(default=3, ge=1)


def _prefixed(env: Mapping[str, str], prefix: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name in fields:
        raw = env.get(prefix + name.upper())
        if raw is None:
            continue
        raw = raw.strip()
        out[name] = raw if raw else None
    return out


def load_settings(env: Mapping[str, str] | None = None) -> EngineSettings:
    """Build :class:`EngineSettings` from defaults plus environment overrides.

    Raises ``pydantic.ValidationError`` when an override is not a valid value
    for its field.
    """

    source = os.environ if env is None else env
    alignment = AlignmentWeights.model_validate(
        _prefixed(source, _ALIGN_PREFIX, AlignmentWeights.model_fields)
    )
    duplicates = DuplicateSettings.model_validate(
        _prefixed(source, _DUPLICATE_PREFIX, DuplicateSettings.model_fields)
    )
    values: dict[str, Any] = {"alignment": alignment, "duplicates": duplicates}
    cluster_raw = (source.get(_CLUSTER_ENV) or "").strip()
    if cluster_raw:
        values["cluster_min_overlap"] = cluster_raw
    return EngineSettings.model_validate(values)


__all__ = ["AlignmentWeights", "DuplicateSettings", "EngineSettings", "load_settings"]
