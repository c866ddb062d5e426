# sitephoto/core/grouping/propagation.py
"""
Attachment propagation pass.

Photos of the same station taken back to back belong to the same site. If any photo
in such a run carries the attachment-road hint, the whole run is rewritten to the
attachment identity, which fixes photos whose own text lacked the marker.

Must run before the final compaction: it changes identities and therefore the
partitioning used by `assign_groups`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from sitephoto.core.identity import attachment_identity, has_attachment_hint, station_number_of
from sitephoto.schemas.models import PhotoAnnotation, Snapshot

from .clustering import DEFAULT_SEGMENT_GAP_S, capture_gap, sorted_by_capture

logger = logging.getLogger(__name__)


def station_chunks(
    snapshot: Mapping[str, PhotoAnnotation], *, gap_s: int = DEFAULT_SEGMENT_GAP_S
) -> list[tuple[str, list[str]]]:
    """(station, filenames) for every time-contiguous chunk, stations in sorted order."""
    by_station: dict[str, list[tuple[str, PhotoAnnotation]]] = {}
    for fname, ann in snapshot.items():
        station = station_number_of(ann)
        if station:
            by_station.setdefault(station, []).append((fname, ann))

    chunks: list[tuple[str, list[str]]] = []
    for station in sorted(by_station):
        ordered = sorted_by_capture(by_station[station])
        current = [ordered[0][0]]
        for prev, curr in zip(ordered, ordered[1:]):
            if capture_gap(prev[1], curr[1]) > gap_s:
                chunks.append((station, current))
                current = []
            current.append(curr[0])
        chunks.append((station, current))
    return chunks


def propagate_attachment(snapshot: Mapping[str, PhotoAnnotation], *, gap_s: int = DEFAULT_SEGMENT_GAP_S) -> Snapshot:
    """Return a new snapshot with attachment identities spread across station chunks."""
    rewrites: dict[str, str] = {}
    for station, files in station_chunks(snapshot, gap_s=gap_s):
        if any(has_attachment_hint(snapshot[f]) for f in files):
            target = attachment_identity(station)
            for f in files:
                rewrites[f] = target

    out: Snapshot = {}
    changed = 0
    for fname, ann in snapshot.items():
        target = rewrites.get(fname)
        if target is not None and target != ann.identity:
            out[fname] = ann.model_copy(update={"identity": target})
            changed += 1
        else:
            out[fname] = ann
    logger.debug("attachment propagation rewrote %d identities", changed)
    return out


__all__ = ["station_chunks", "propagate_attachment"]
