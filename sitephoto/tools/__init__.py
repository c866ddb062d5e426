# sitephoto/tools/__init__.py
"""
sitephoto tools package

I/O wrappers around the reasoning core:
  - fs_ops    image discovery and folder moves
  - storage   photo-groups.json, photo-tags.json, material JSONL, activity CSV
  - vision    annotation providers (subpackage)

The core (`sitephoto.core`) never imports from here.
"""

from __future__ import annotations

from .fs_ops import apply_moves, collect_images_flat, collect_subdirs, plan_moves, sanitize_folder_name
from .storage import (
    load_group_records,
    load_tag_records,
    read_activity_csv,
    read_material_records,
    save_group_records,
    save_tag_records,
)

__all__ = [
    "apply_moves",
    "collect_images_flat",
    "collect_subdirs",
    "plan_moves",
    "sanitize_folder_name",
    "load_group_records",
    "load_tag_records",
    "read_activity_csv",
    "read_material_records",
    "save_group_records",
    "save_tag_records",
]
