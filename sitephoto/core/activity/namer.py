# sitephoto/core/activity/namer.py
"""
Activity namer: per-photo text → activity folder name.

Rules, first match wins:
  1) Structured board fields (metadata keys, role keys and numeric values dropped).
  2) Top keywords from the best available text source.
  3) Gap carry: reuse the previous photo's activity when it was taken less than
     `gap_minutes` earlier; otherwise "unclassified".
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from sitephoto.schemas.labels import METADATA_FIELD_KEYS, PERSON_ROLE_SUFFIXES, UNCLASSIFIED_ACTIVITY
from sitephoto.schemas.models import ActivityFrame, ActivityRow

from .keywords import extract_top_keywords

logger = logging.getLogger(__name__)

DEFAULT_GAP_MINUTES = 10
DEFAULT_TOP_K = 2


def _has_digit(s: str) -> bool:
    return any(ch.isdigit() for ch in s)


def name_from_fields(fields: Mapping[str, str]) -> str | None:
    """Name from structured board fields, or None when nothing usable remains."""
    keep: dict[str, str] = {}
    for key, value in fields.items():
        key, value = key.strip(), (value or "").strip()
        if not key or key in METADATA_FIELD_KEYS or key.endswith(PERSON_ROLE_SUFFIXES):
            continue
        if _has_digit(value):
            continue
        keep[key] = value
    keys = sorted(keep)
    if len(keys) >= 2:
        return f"{keys[0]}_{keys[1]}"
    if len(keys) == 1:
        key = keys[0]
        return f"{key}_{keep[key]}" if keep[key] else key
    return None


def best_text(row: ActivityRow) -> str:
    """Per-line board transcription, else board + other text, else notes."""
    lines = [ln for ln in row.board_lines if ln.strip()]
    if lines:
        return "\n".join(lines)
    combined = "\n".join(t for t in (row.board_text, row.other_text) if t.strip())
    if combined:
        return combined
    return row.notes


def name_from_text(row: ActivityRow, *, top_k: int = DEFAULT_TOP_K) -> str | None:
    terms = extract_top_keywords(best_text(row), top_k)
    if not terms:
        return None
    return "_".join(terms)


def classify_activity(
    row: ActivityRow,
    previous: ActivityFrame | None,
    *,
    gap_minutes: int = DEFAULT_GAP_MINUTES,
    top_k: int = DEFAULT_TOP_K,
    fallback: str = UNCLASSIFIED_ACTIVITY,
) -> str:
    name = name_from_fields(row.board_fields) or name_from_text(row, top_k=top_k)
    if name:
        return name
    if previous is not None and row.ts is not None and row.ts - previous.ts < gap_minutes * 60:
        return previous.activity
    return fallback


def infer_activity_with_gap(
    rows: Iterable[ActivityRow],
    *,
    gap_minutes: int = DEFAULT_GAP_MINUTES,
    top_k: int = DEFAULT_TOP_K,
    fallback: str = UNCLASSIFIED_ACTIVITY,
) -> list[tuple[str, str]]:
    """
    Left-to-right scan over rows ordered by (ts, file); unknown ts sort last.

    Returns (file, activity) pairs in scan order. A row without a timestamp can
    neither carry nor be carried into.
    """
    ordered = sorted(rows, key=lambda r: (r.ts is None, r.ts or 0, r.file))
    out: list[tuple[str, str]] = []
    frame: ActivityFrame | None = None
    for row in ordered:
        activity = classify_activity(row, frame, gap_minutes=gap_minutes, top_k=top_k, fallback=fallback)
        out.append((row.file, activity))
        frame = ActivityFrame(activity=activity, ts=row.ts) if row.ts is not None else None
    classified = sum(1 for _, a in out if a != fallback)
    logger.debug("named %d photos (%d classified, gap=%dmin)", len(out), classified, gap_minutes)
    return out


__all__ = [
    "DEFAULT_GAP_MINUTES",
    "DEFAULT_TOP_K",
    "name_from_fields",
    "best_text",
    "name_from_text",
    "classify_activity",
    "infer_activity_with_gap",
]
