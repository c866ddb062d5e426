# sitephoto/core/activity/keywords.py
"""
Keyword extraction for activity naming.

Pure functions over board/notes text. Tie-breaks use an explicit first-occurrence
counter, never dict or set iteration order.
"""

from __future__ import annotations

import re
import string
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sitephoto.schemas.labels import (
    ACTIVITY_ALLOWLIST,
    ACTIVITY_STOPWORDS,
    CONFIRMATION_SUFFIXES,
    INSPECTION_SUFFIXES,
    STATUS_SUFFIXES,
)

# Whitespace (incl. U+3000), ASCII/full-width commas and Japanese punctuation
_SPLIT_RE = re.compile(r"[\s,、。，．・：；「」『』（）【】〔〕［］｛｝〈〉《》／]+")
_ASCII_PUNCT = frozenset(string.punctuation)


@dataclass(slots=True)
class _Hit:
    term: str
    count: int
    first: int


def tokenize(text: str) -> list[str]:
    return [t for t in _SPLIT_RE.split(text) if t]


def _is_noise(token: str) -> bool:
    return any(ch.isdigit() or ch in _ASCII_PUNCT for ch in token)


def relevance_bonus(term: str) -> int:
    """3 for status/condition terms, 2 for inspection/instruction, 1 for confirmation, else 0."""
    if any(s in term for s in STATUS_SUFFIXES):
        return 3
    if any(s in term for s in INSPECTION_SUFFIXES):
        return 2
    if any(s in term for s in CONFIRMATION_SUFFIXES):
        return 1
    return 0


def extract_top_keywords(
    text: str,
    k: int = 2,
    *,
    allowlist: Sequence[str] = ACTIVITY_ALLOWLIST,
    stopwords: Iterable[str] = ACTIVITY_STOPWORDS,
) -> list[str]:
    """
    Top-k allowlisted activity terms found in text.

    Exact token matches are counted; a token that is not itself allowlisted credits
    every allowlist term it contains (compound tokens such as "舗装転圧状況").

    >>> extract_top_keywords("工事名 市道 交通保安施設 設置状況")
    ['設置状況', '交通保安施設']
    """
    if k <= 0:
        return []
    stop = set(stopwords)
    allowed = set(allowlist)

    hits: dict[str, _Hit] = {}
    order = 0

    def _credit(term: str) -> None:
        nonlocal order
        hit = hits.get(term)
        if hit is None:
            hits[term] = _Hit(term, 1, order)
            order += 1
        else:
            hit.count += 1

    for token in tokenize(text):
        if token in stop or _is_noise(token):
            continue
        if token in allowed:
            _credit(token)
            continue
        for term in allowlist:
            if term in token:
                _credit(term)

    ranked = sorted(hits.values(), key=lambda h: (relevance_bonus(h.term), h.count, -h.first), reverse=True)
    return [h.term for h in ranked[:k]]


__all__ = ["tokenize", "relevance_bonus", "extract_top_keywords"]
