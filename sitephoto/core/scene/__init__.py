# sitephoto/core/scene/__init__.py

from .classifier import (
    DEFAULT_BOARD_THRESHOLD,
    DEFAULT_MEASURE_THRESHOLD,
    infer_scene_from_objects,
    infer_scene_from_objects_with_params,
    infer_scene_from_objects_with_params_and_rules,
    is_e_board_only,
    resolve_scene_type,
)
from .normalize import (
    MatchMode,
    MatchResult,
    NormalizeRules,
    default_measure_labels,
    default_normalize_rules,
    match_measure_labels,
)

__all__ = [
    "DEFAULT_BOARD_THRESHOLD",
    "DEFAULT_MEASURE_THRESHOLD",
    "infer_scene_from_objects",
    "infer_scene_from_objects_with_params",
    "infer_scene_from_objects_with_params_and_rules",
    "is_e_board_only",
    "resolve_scene_type",
    "MatchMode",
    "MatchResult",
    "NormalizeRules",
    "default_measure_labels",
    "default_normalize_rules",
    "match_measure_labels",
]
