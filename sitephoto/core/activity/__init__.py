# sitephoto/core/activity/__init__.py

from .keywords import extract_top_keywords, relevance_bonus, tokenize
from .namer import (
    DEFAULT_GAP_MINUTES,
    DEFAULT_TOP_K,
    best_text,
    classify_activity,
    infer_activity_with_gap,
    name_from_fields,
    name_from_text,
)

__all__ = [
    "DEFAULT_GAP_MINUTES",
    "DEFAULT_TOP_K",
    "tokenize",
    "relevance_bonus",
    "extract_top_keywords",
    "name_from_fields",
    "name_from_text",
    "best_text",
    "classify_activity",
    "infer_activity_with_gap",
]
