# sitephoto/core/identity.py
"""
Identity normalizer and station-number helpers.

Pure functions; no IO. `normalize_identity` looks only at one record's own text,
so it can run record by record, while `normalize_identities` applies it to a whole
snapshot and returns a new one.

Public API
----------
extract_station_number(text: str) -> str | None
has_attachment_hint(ann: PhotoAnnotation) -> bool
station_number_of(ann: PhotoAnnotation) -> str | None
normalize_identity(ann: PhotoAnnotation) -> str
normalize_identities(snapshot: Mapping[str, PhotoAnnotation]) -> Snapshot
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping

from sitephoto.schemas.labels import ATTACHMENT_PREFIX, ATTACHMENT_ROAD_KEYWORD, STATION_MARKERS, STATION_PREFIX
from sitephoto.schemas.models import PhotoAnnotation, Snapshot

logger = logging.getLogger(__name__)

# ASCII digits only; full-width digits are not station numbers
_DIGITS_RE = re.compile(r"[0-9]+")


def extract_station_number(text: str) -> str | None:
    """
    Return "No.<digits>" for the first digit run after the earliest station marker.

    >>> extract_station_number("測点 NO 12 付近")
    'No.12'
    >>> extract_station_number("No.abc") is None
    True
    """
    if not text:
        return None
    first = -1
    marker_len = 0
    for marker in STATION_MARKERS:
        pos = text.find(marker)
        if pos != -1 and (first == -1 or pos < first):
            first, marker_len = pos, len(marker)
    if first == -1:
        return None
    m = _DIGITS_RE.search(text, first + marker_len)
    if not m:
        return None
    return f"{STATION_PREFIX}{m.group(0)}"


def first_station_number(texts: Iterable[str]) -> str | None:
    """First successful extraction over texts, in order."""
    for text in texts:
        station = extract_station_number(text)
        if station:
            return station
    return None


def has_attachment_hint(ann: PhotoAnnotation) -> bool:
    """True if the identity or detected text mentions the attachment road."""
    return ATTACHMENT_ROAD_KEYWORD in ann.identity or ATTACHMENT_ROAD_KEYWORD in ann.detected_text


def station_number_of(ann: PhotoAnnotation) -> str | None:
    return first_station_number((ann.identity, ann.detected_text, ann.description))


def attachment_identity(station: str) -> str:
    return f"{ATTACHMENT_PREFIX} {station}"


def normalize_identity(ann: PhotoAnnotation) -> str:
    """
    Rewrite the identity of an attachment-road photo to "<prefix> No.<digits>".

    The keyword must appear in detected_text/description; the station marker is
    searched there first, then in the identity itself. Without a digit run the
    identity is returned unchanged.
    """
    text = "\n".join((ann.detected_text, ann.description))
    if ATTACHMENT_ROAD_KEYWORD not in text:
        return ann.identity
    station = first_station_number((text, ann.identity))
    if station is None:
        return ann.identity
    return attachment_identity(station)


def normalize_identities(snapshot: Mapping[str, PhotoAnnotation]) -> Snapshot:
    out: Snapshot = {}
    changed = 0
    for fname, ann in snapshot.items():
        identity = normalize_identity(ann)
        if identity != ann.identity:
            changed += 1
            out[fname] = ann.model_copy(update={"identity": identity})
        else:
            out[fname] = ann
    logger.debug("identity normalizer rewrote %d of %d records", changed, len(out))
    return out


__all__ = [
    "extract_station_number",
    "first_station_number",
    "has_attachment_hint",
    "station_number_of",
    "attachment_identity",
    "normalize_identity",
    "normalize_identities",
]
