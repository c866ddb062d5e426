# tests/utils.py
"""
Single source of truth for test data, factories, and canonical payloads.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from PIL import Image

from sitephoto.schemas.models import ActivityRow, DetectedObject, PhotoAnnotation, Snapshot

# -----------------------------
# Global defaults (edit once)
# -----------------------------

# 2024-05-01 09:00:00 UTC; tests express capture times as offsets from here
BASE_TS = int(datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc).timestamp())

ATTACH = "付替道路"


def at(seconds: int = 0, *, minutes: int = 0) -> int:
    """Absolute timestamp at an offset from BASE_TS."""
    return BASE_TS + seconds + minutes * 60


# -----------------------------
# Annotation factories
# -----------------------------


def make_annotation(
    identity: str = "",
    ts: int | None = None,
    *,
    text: str = "",
    description: str = "",
    group: int = 0,
    **extra: Any,
) -> PhotoAnnotation:
    """PhotoAnnotation with the fields the grouping passes look at."""
    return PhotoAnnotation(
        identity=identity,
        captured_at=ts,
        detected_text=text,
        description=description,
        group=group,
        **extra,
    )


def make_records(rows: Iterable[tuple[str, str, int | None]]) -> Snapshot:
    """(filename, identity, timestamp) triples → snapshot."""
    return {f: make_annotation(identity, ts) for f, identity, ts in rows}


def groups_of(snapshot: Mapping[str, PhotoAnnotation]) -> dict[str, int]:
    return {f: a.group for f, a in snapshot.items()}


def identities_of(snapshot: Mapping[str, PhotoAnnotation]) -> dict[str, str]:
    return {f: a.identity for f, a in snapshot.items()}


def obj(label: str, area: float) -> DetectedObject:
    return DetectedObject(label=label, area_ratio=area)


def make_row(
    file: str,
    ts: int | None = None,
    *,
    fields: Mapping[str, str] | None = None,
    lines: Iterable[str] = (),
    board_text: str = "",
    other_text: str = "",
    notes: str = "",
) -> ActivityRow:
    return ActivityRow(
        file=file,
        ts=ts,
        board_fields=dict(fields or {}),
        board_lines=list(lines),
        board_text=board_text,
        other_text=other_text,
        notes=notes,
    )


# -----------------------------
# Files on disk
# -----------------------------


def write_image(path: Path, *, size: tuple[int, int] = (8, 8), exif_datetime: str | None = None) -> Path:
    """Tiny JPEG; optionally with an EXIF DateTime tag ("YYYY:MM:DD HH:MM:SS")."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, (128, 128, 128))
    if exif_datetime is None:
        img.save(path, format="JPEG")
        return path
    exif = Image.Exif()
    exif[306] = exif_datetime
    img.save(path, format="JPEG", exif=exif)
    return path


def write_group_file(folder: Path, records: Mapping[str, Any]) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / "photo-groups.json"
    path.write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
    return path


def write_activity_csv(path: Path, rows: Iterable[Mapping[str, str]]) -> Path:
    cols = ["file", "ts", "board_text", "other_text", "notes", "board_lines", "board_fields"]
    with path.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=cols)
        w.writeheader()
        for r in rows:
            w.writerow({c: r.get(c, "") for c in cols})
    return path
