# sitephoto/core/grouping/__init__.py

from .clustering import DEFAULT_SEGMENT_GAP_S, Segment, assign_groups, build_segments, compact_segments
from .pipeline import run_grouping_pipeline, summarize_groups
from .propagation import propagate_attachment, station_chunks

__all__ = [
    "DEFAULT_SEGMENT_GAP_S",
    "Segment",
    "assign_groups",
    "build_segments",
    "compact_segments",
    "propagate_attachment",
    "station_chunks",
    "run_grouping_pipeline",
    "summarize_groups",
]
