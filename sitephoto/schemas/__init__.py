# sitephoto/schemas/__init__.py
from .labels import ATTACHMENT_PREFIX, ATTACHMENT_ROAD_KEYWORD, UNCLASSIFIED_ACTIVITY, MachineRole, SceneType
from .models import (
    ActivityFrame,
    ActivityRow,
    BBox,
    DetectedObject,
    GroupSummary,
    MaterialRecord,
    PhotoAnnotation,
    Snapshot,
    TagRecord,
)

__all__ = [
    "ATTACHMENT_PREFIX",
    "ATTACHMENT_ROAD_KEYWORD",
    "UNCLASSIFIED_ACTIVITY",
    "MachineRole",
    "SceneType",
    "ActivityFrame",
    "ActivityRow",
    "BBox",
    "DetectedObject",
    "GroupSummary",
    "MaterialRecord",
    "PhotoAnnotation",
    "Snapshot",
    "TagRecord",
]
