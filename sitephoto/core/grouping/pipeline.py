# sitephoto/core/grouping/pipeline.py
"""
Grouping pipeline: normalize → cluster → propagate → cluster again if needed.

Each pass takes a snapshot and returns a new one; nothing is mutated in place, so
every pass can also be called and tested on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from sitephoto.core.identity import normalize_identities
from sitephoto.schemas.models import GroupSummary, PhotoAnnotation, Snapshot

from .clustering import DEFAULT_SEGMENT_GAP_S, assign_groups
from .propagation import propagate_attachment

logger = logging.getLogger(__name__)


def run_grouping_pipeline(snapshot: Mapping[str, PhotoAnnotation], *, gap_s: int = DEFAULT_SEGMENT_GAP_S) -> Snapshot:
    if not snapshot:
        return {}
    normalized = normalize_identities(snapshot)
    clustered = assign_groups(normalized, gap_s=gap_s)
    propagated = propagate_attachment(clustered, gap_s=gap_s)

    if any(propagated[f].identity != clustered[f].identity for f in clustered):
        clustered = assign_groups(propagated, gap_s=gap_s)

    n_groups = len({a.group for a in clustered.values()})
    logger.info("grouped %d photos into %d groups", len(clustered), n_groups)
    return clustered


def summarize_groups(snapshot: Mapping[str, PhotoAnnotation]) -> list[GroupSummary]:
    """One summary per group number, ascending; identity/type taken from the first member by filename."""
    by_group: dict[int, list[tuple[str, PhotoAnnotation]]] = {}
    for fname, ann in snapshot.items():
        by_group.setdefault(ann.group, []).append((fname, ann))

    out: list[GroupSummary] = []
    for g in sorted(by_group):
        members = sorted(by_group[g], key=lambda it: it[0])
        head = members[0][1]
        out.append(
            GroupSummary(
                group=g,
                identity=head.identity,
                machine_type=head.machine_type,
                members=[(f, a.role) for f, a in members],
            )
        )
    return out


__all__ = ["run_grouping_pipeline", "summarize_groups"]
