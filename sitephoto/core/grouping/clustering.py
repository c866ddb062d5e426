# sitephoto/core/grouping/clustering.py
"""
Temporal clustering engine.

Purpose
-------
Assign a dense group number (1..N) to every photo of a snapshot, where a group is a
time-contiguous run of photos sharing one identity and one attachment-hint value.

Design
------
- Partition by identity first, so unrelated objects never merge.
- Inside a partition, split on a capture gap above `gap_s` or on a change of the
  attachment hint (main line vs. side road under a reused identity).
- Compaction: segments are sorted globally by (first_timestamp, identity, temp_id)
  and renumbered, so output never depends on dict or partition iteration order.

Invariants & Guardrails
-----------------------
- Unknown timestamps sort after all known ones and never force a split.
- Group numbers are exactly {1..N}; permuting the input does not change them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from sitephoto.core.identity import has_attachment_hint
from sitephoto.schemas.models import PhotoAnnotation, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_SEGMENT_GAP_S = 300


@dataclass(frozen=True, slots=True)
class Segment:
    first_ts: float  # math.inf when the first member has no timestamp
    identity: str
    temp_id: int
    files: tuple[str, ...]

    def sort_key(self) -> tuple[float, str, int]:
        return (self.first_ts, self.identity, self.temp_id)


def capture_sort_key(fname: str, ann: PhotoAnnotation) -> tuple[float, str]:
    """(captured_at, filename) with unknown timestamps as +inf."""
    ts = math.inf if ann.captured_at is None else float(ann.captured_at)
    return (ts, fname)


def capture_gap(prev: PhotoAnnotation, curr: PhotoAnnotation) -> int:
    if prev.captured_at is None or curr.captured_at is None:
        return 0
    return abs(curr.captured_at - prev.captured_at)


def sorted_by_capture(items: Iterable[tuple[str, PhotoAnnotation]]) -> list[tuple[str, PhotoAnnotation]]:
    return sorted(items, key=lambda it: capture_sort_key(it[0], it[1]))


def build_segments(snapshot: Mapping[str, PhotoAnnotation], *, gap_s: int = DEFAULT_SEGMENT_GAP_S) -> list[Segment]:
    """Temporary segments in discovery order (temp_id ascending)."""
    partitions: dict[str, list[tuple[str, PhotoAnnotation]]] = {}
    for fname, ann in snapshot.items():
        partitions.setdefault(ann.identity, []).append((fname, ann))

    segments: list[Segment] = []
    temp_id = 0

    def _close(members: list[tuple[str, PhotoAnnotation]]) -> None:
        nonlocal temp_id
        head = members[0][1]
        first_ts = math.inf if head.captured_at is None else float(head.captured_at)
        segments.append(Segment(first_ts, head.identity, temp_id, tuple(f for f, _ in members)))
        temp_id += 1

    # Sorted identities keep temp_id stable across runs; compaction does not rely on it.
    for identity in sorted(partitions):
        ordered = sorted_by_capture(partitions[identity])
        current: list[tuple[str, PhotoAnnotation]] = [ordered[0]]
        for prev, curr in zip(ordered, ordered[1:]):
            split = capture_gap(prev[1], curr[1]) > gap_s or has_attachment_hint(prev[1]) != has_attachment_hint(curr[1])
            if split:
                _close(current)
                current = []
            current.append(curr)
        _close(current)

    return segments


def compact_segments(segments: Iterable[Segment]) -> dict[str, int]:
    """Renumber segments 1..N by (first_timestamp, identity, temp_id); filename → group."""
    groups: dict[str, int] = {}
    for number, seg in enumerate(sorted(segments, key=Segment.sort_key), start=1):
        for fname in seg.files:
            groups[fname] = number
    return groups


def assign_groups(snapshot: Mapping[str, PhotoAnnotation], *, gap_s: int = DEFAULT_SEGMENT_GAP_S) -> Snapshot:
    """Return a new snapshot where every record carries its compacted group number."""
    segments = build_segments(snapshot, gap_s=gap_s)
    groups = compact_segments(segments)
    logger.debug("clustered %d photos into %d segments (gap=%ss)", len(snapshot), len(segments), gap_s)

    out: Snapshot = {}
    for fname, ann in snapshot.items():
        group = groups.get(fname, 0)
        out[fname] = ann if ann.group == group else ann.model_copy(update={"group": group})
    return out


__all__ = [
    "DEFAULT_SEGMENT_GAP_S",
    "Segment",
    "capture_sort_key",
    "capture_gap",
    "sorted_by_capture",
    "build_segments",
    "compact_segments",
    "assign_groups",
]
