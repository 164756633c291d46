"""Public interface for the ``statement_entities`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .alignment import AlignmentOutcome, AlignmentResult, RecordAligner
from .api import (
    EntityWorkspace,
    aggregate_type,
    align_and_repair,
    align_tables,
    apply_trim,
    build_clusters,
    canonicalize,
    classify_type,
    compile_trim_rules,
    description_similarity,
    find_duplicates,
    levenshtein,
    preview_trim,
    smart_key,
)
from .canonical import Canonicalizer, SmartKeyGenerator
from .clusters import Cluster
from .duplicates import MergeSuggestion
from .errors import InvalidMergeTarget, MalformedRuleError, StatementEntitiesError
from .models import AlignmentRow, EntityGroup, ExtractedTable, RawTransaction
from .settings import AlignmentWeights, DuplicateSettings, EngineSettings, load_settings
from .trim_rules import CompiledRuleSet, TrimMode, TrimPreview
from .type_codes import TypeClassifier
from .workspace import CaseMode

__all__ = [
    # API
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
    # Components
    "Canonicalizer",
    "EntityWorkspace",
    "RecordAligner",
    "SmartKeyGenerator",
    "TypeClassifier",
    # Models / types
    "AlignmentOutcome",
    "AlignmentResult",
    "AlignmentRow",
    "CaseMode",
    "Cluster",
    "CompiledRuleSet",
    "EntityGroup",
    "ExtractedTable",
    "MergeSuggestion",
    "RawTransaction",
    "TrimMode",
    "TrimPreview",
    # Settings
    "AlignmentWeights",
    "DuplicateSettings",
    "EngineSettings",
    "load_settings",
    # Errors
    "InvalidMergeTarget",
    "MalformedRuleError",
    "StatementEntitiesError",
]
