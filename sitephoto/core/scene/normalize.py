# sitephoto/core/scene/normalize.py
"""
Label normalization and measure-lexicon matching.

Providers spell the same tool many ways ("Tape-Measure", "ｽｹｰﾙ", "tape measure"),
so labels and lexicon terms go through the same folding before comparison.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from sitephoto.schemas.labels import DEFAULT_MEASURE_LABELS

# Hyphen, dash and long-vowel-like variants that providers mix freely
_DASHES = frozenset("-‐‑‒–—―−－﹣~〜～")


class MatchMode(str, Enum):
    substring = "substring"
    exact = "exact"


@dataclass(frozen=True, slots=True)
class NormalizeRules:
    width_fold: bool = True  # NFKC: full-width ASCII and half-width kana
    casefold: bool = True
    strip_whitespace: bool = True
    strip_punctuation: bool = True
    strip_dashes: bool = True

    def apply(self, text: str) -> str:
        s = unicodedata.normalize("NFKC", text) if self.width_fold else text
        if self.casefold:
            s = s.casefold()
        out: list[str] = []
        for ch in s:
            if self.strip_dashes and ch in _DASHES:
                continue
            if self.strip_whitespace and ch.isspace():
                continue
            if self.strip_punctuation and unicodedata.category(ch).startswith("P"):
                continue
            out.append(ch)
        return "".join(out)


def default_normalize_rules() -> NormalizeRules:
    return NormalizeRules()


def default_measure_labels() -> list[str]:
    return list(DEFAULT_MEASURE_LABELS)


@dataclass(frozen=True, slots=True)
class MatchResult:
    matched: bool
    label: str
    term: str | None = None  # lexicon term as given by the caller


def match_measure_labels(
    label: str,
    lexicon: Iterable[str],
    *,
    mode: MatchMode = MatchMode.substring,
    rules: NormalizeRules | None = None,
) -> MatchResult:
    """Match one object label against the lexicon; first matching term wins."""
    rules = rules or default_normalize_rules()
    norm_label = rules.apply(label)
    if not norm_label:
        return MatchResult(False, label)
    for term in lexicon:
        norm_term = rules.apply(term)
        if not norm_term:
            continue
        hit = norm_term == norm_label if mode is MatchMode.exact else norm_term in norm_label
        if hit:
            return MatchResult(True, label, term)
    return MatchResult(False, label)


def normalized_lexicon(lexicon: Sequence[str], rules: NormalizeRules | None = None) -> list[str]:
    """Normalized, de-duplicated terms in first-seen order; empty terms dropped."""
    rules = rules or default_normalize_rules()
    seen: set[str] = set()
    out: list[str] = []
    for term in lexicon:
        n = rules.apply(term)
        if n and n not in seen:
            seen.add(n)
            out.append(n)
    return out


__all__ = [
    "MatchMode",
    "NormalizeRules",
    "MatchResult",
    "default_normalize_rules",
    "default_measure_labels",
    "match_measure_labels",
    "normalized_lexicon",
]
