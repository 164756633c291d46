"""Flat functional surface for the ``statement_entities`` package.

This module is a stable import surface over the component modules. Each
function either delegates to a module-level default (canonicalizer, smart key
generator, type classifier) or is a pure computation, so hosts can call the
engine without building any objects:

>>> canonicalize("DIRECT DEBIT TESCO STORES")
'TESCO STORES'

Stateful mapping work (``get_entity_mapping`` / ``set_entity_mapping`` and
the bulk operations built on them) lives on
:class:`~statement_entities.workspace.EntityWorkspace`.
"""

from __future__ import annotations

from .alignment import align_and_repair, description_similarity
from .canonical import canonicalize, smart_key
from .clusters import build_clusters
from .duplicates import find_duplicates, levenshtein
from .tables import align_tables
from .trim_rules import apply_trim, compile_trim_rules, preview_trim
from .type_codes import aggregate_type, classify_type
from .workspace import EntityWorkspace

__all__ = [
    "EntityWorkspace",
    "aggregate_type",
    "align_and_repair",
    "align_tables",
    "apply_trim",
    "build_clusters",
    "canonicalize",
    "classify_type",
    "compile_trim_rules",
    "description_similarity",
    "find_duplicates",
    "levenshtein",
    "preview_trim",
    "smart_key",
]
