# sitephoto/core/scene/classifier.py
"""
Scene classifier: detected objects → overview | board_with_measure | measure_closeup.

Rules
-----
- measure area ≥ measure_threshold                      → measure_closeup
- board area ≥ board_threshold, or board and measure > 0 → board_with_measure
- otherwise                                              → overview

Electronic boards count as boards only when `include_electronic_board` is set.
`resolve_scene_type` is the caller-level entry point and applies the
electronic-board-only override on top of the pure rule.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sitephoto.schemas.labels import BOARD_TERMS, ELECTRONIC_BOARD_TERMS, SceneType
from sitephoto.schemas.models import DetectedObject

from .normalize import MatchMode, NormalizeRules, default_measure_labels, default_normalize_rules, normalized_lexicon

DEFAULT_BOARD_THRESHOLD = 0.15
DEFAULT_MEASURE_THRESHOLD = 0.25


def is_electronic_board(label: str) -> bool:
    s = label.lower()
    return any(t in s for t in ELECTRONIC_BOARD_TERMS)


def is_board(label: str, *, include_electronic_board: bool = False) -> bool:
    s = label.lower()
    if not any(t in s for t in BOARD_TERMS):
        return False
    return include_electronic_board or not is_electronic_board(label)


def is_e_board_only(objects: Iterable[DetectedObject]) -> bool:
    """True when an electronic board is present and no physical board is."""
    saw_electronic = False
    for obj in objects:
        if is_electronic_board(obj.label):
            saw_electronic = True
        elif is_board(obj.label):
            return False
    return saw_electronic


def max_board_area(objects: Iterable[DetectedObject], *, include_electronic_board: bool = False) -> float:
    return max(
        (o.area_ratio for o in objects if is_board(o.label, include_electronic_board=include_electronic_board)),
        default=0.0,
    )


def max_measure_area(
    objects: Iterable[DetectedObject],
    measure_lexicon: Sequence[str],
    *,
    rules: NormalizeRules | None = None,
    mode: MatchMode = MatchMode.substring,
) -> float:
    rules = rules or default_normalize_rules()
    terms = normalized_lexicon(measure_lexicon, rules)
    best = 0.0
    for obj in objects:
        label = rules.apply(obj.label)
        if not label:
            continue
        if mode is MatchMode.exact:
            hit = label in terms
        else:
            hit = any(t in label for t in terms)
        if hit and obj.area_ratio > best:
            best = obj.area_ratio
    return best


def infer_scene_from_objects_with_params_and_rules(
    objects: Sequence[DetectedObject],
    include_electronic_board: bool,
    board_threshold: float,
    measure_threshold: float,
    measure_lexicon: Sequence[str],
    rules: NormalizeRules,
    mode: MatchMode = MatchMode.substring,
) -> SceneType:
    board = max_board_area(objects, include_electronic_board=include_electronic_board)
    measure = max_measure_area(objects, measure_lexicon, rules=rules, mode=mode)
    if measure >= measure_threshold:
        return SceneType.measure_closeup
    if board >= board_threshold or (board > 0 and measure > 0):
        return SceneType.board_with_measure
    return SceneType.overview


def infer_scene_from_objects_with_params(
    objects: Sequence[DetectedObject],
    include_electronic_board: bool,
    board_threshold: float,
    measure_threshold: float,
    measure_lexicon: Sequence[str],
) -> SceneType:
    return infer_scene_from_objects_with_params_and_rules(
        objects,
        include_electronic_board,
        board_threshold,
        measure_threshold,
        measure_lexicon,
        default_normalize_rules(),
    )


def infer_scene_from_objects(
    objects: Sequence[DetectedObject],
    include_electronic_board: bool = False,
    board_threshold: float = DEFAULT_BOARD_THRESHOLD,
    measure_threshold: float = DEFAULT_MEASURE_THRESHOLD,
    measure_lexicon: Sequence[str] | None = None,
) -> SceneType:
    lexicon = default_measure_labels() if measure_lexicon is None else measure_lexicon
    return infer_scene_from_objects_with_params(objects, include_electronic_board, board_threshold, measure_threshold, lexicon)


def resolve_scene_type(
    objects: Sequence[DetectedObject],
    *,
    include_electronic_board: bool = False,
    board_threshold: float = DEFAULT_BOARD_THRESHOLD,
    measure_threshold: float = DEFAULT_MEASURE_THRESHOLD,
    measure_lexicon: Sequence[str] | None = None,
) -> SceneType:
    """Record-level scene type; an electronic-board-only photo is an overview unless e-boards count."""
    if not include_electronic_board and is_e_board_only(objects):
        return SceneType.overview
    return infer_scene_from_objects(objects, include_electronic_board, board_threshold, measure_threshold, measure_lexicon)


__all__ = [
    "DEFAULT_BOARD_THRESHOLD",
    "DEFAULT_MEASURE_THRESHOLD",
    "is_board",
    "is_electronic_board",
    "is_e_board_only",
    "max_board_area",
    "max_measure_area",
    "infer_scene_from_objects",
    "infer_scene_from_objects_with_params",
    "infer_scene_from_objects_with_params_and_rules",
    "resolve_scene_type",
]
