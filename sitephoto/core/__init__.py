"""
sitephoto.core
==============

Post-annotation reasoning layer. Pure, offline, deterministic.

Exports:
- Identity: normalize_identity(), normalize_identities(), extract_station_number()
- Grouping: assign_groups(), propagate_attachment(), run_grouping_pipeline()
- Activity: classify_activity(), infer_activity_with_gap(), extract_top_keywords()
- Scene: infer_scene_from_objects(), resolve_scene_type()
"""

from __future__ import annotations

from .activity import classify_activity, extract_top_keywords, infer_activity_with_gap
from .grouping import assign_groups, propagate_attachment, run_grouping_pipeline
from .identity import extract_station_number, normalize_identities, normalize_identity
from .scene import infer_scene_from_objects, resolve_scene_type

__all__ = [
    "extract_station_number",
    "normalize_identity",
    "normalize_identities",
    "assign_groups",
    "propagate_attachment",
    "run_grouping_pipeline",
    "classify_activity",
    "extract_top_keywords",
    "infer_activity_with_gap",
    "infer_scene_from_objects",
    "resolve_scene_type",
]
