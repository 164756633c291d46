"""Semi-automatic first-pass grouping of uncategorized entities.

Entities are keyed with :func:`statement_entities.canonical.smart_key`; the
longest names lead, and every unassigned entity whose key equals or overlaps
the leader's joins the leader's cluster. Clusters are proposals; see
:meth:`statement_entities.workspace.EntityWorkspace.apply_clusters`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .canonical import SmartKeyGenerator, default_smart_key_generator
from .lexicon import UNCATEGORIZED_LABELS
from .logging_setup import get_logger
from .models import EntityGroup

_logger = get_logger("statement_entities.clusters")

_MIN_KEY_LENGTH = 3


@dataclass(frozen=True, slots=True)
class Cluster:
    """A proposed merge: ``members`` (leader first) renamed to ``name``."""

    name: str
    leader: str
    members: tuple[str, ...]


def _keys_overlap(a: str, b: str, min_overlap_chars: int) -> bool:
    if a == b:
        return True
    shorter, longer = sorted((a, b), key=len)
    return len(shorter) >= min_overlap_chars and shorter in longer


def _entity_name(entity: EntityGroup | str) -> str | None:
    if isinstance(entity, EntityGroup):
        if entity.category.strip().upper() not in UNCATEGORIZED_LABELS:
            return None
        return entity.name
    return entity


def build_clusters(
    entities: Iterable[EntityGroup | str],
    min_overlap_chars: int = 3,
    *,
    key_generator: SmartKeyGenerator | None = None,
) -> list[Cluster]:
    """Group uncategorized entities whose smart keys overlap.

    ``entities`` may be :class:`EntityGroup` objects (categorized ones are
    skipped) or bare entity names. Entities whose key is two characters or
    shorter never cluster. Each entity lands in at most one cluster; entities
    that match nothing form no cluster. The result is sorted by name.
    """

    gen = key_generator or default_smart_key_generator()
    pool: list[tuple[str, str]] = []
    seen: set[str] = set()
    for entity in entities:
        name = _entity_name(entity)
        if name is None or name in seen:
            continue
        seen.add(name)
        key = gen.smart_key(name)
        if len(key) >= _MIN_KEY_LENGTH:
            pool.append((name, key))
    pool.sort(key=lambda item: len(item[0]), reverse=True)

    clusters: list[Cluster] = []
    assigned: set[int] = set()
    for i, (leader, leader_key) in enumerate(pool):
        if i in assigned:
            continue
        matches = [
            j
            for j, (_name, key) in enumerate(pool)
            if j != i and j not in assigned and _keys_overlap(leader_key, key, min_overlap_chars)
        ]
        if not matches:
            continue
        assigned.add(i)
        assigned.update(matches)
        clusters.append(
            Cluster(
                name=leader_key,
                leader=leader,
                members=(leader, *(pool[j][0] for j in matches)),
            )
        )

    clusters.sort(key=lambda c: c.name)
    _logger.debug("cluster scan: %d candidates, %d clusters", len(pool), len(clusters))
    return clusters


__all__ = ["Cluster", "build_clusters"]
