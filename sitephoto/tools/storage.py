# sitephoto/tools/storage.py
"""
Record persistence: photo-groups.json, photo-tags.json, material JSONL, activity CSV.

Boundary checks live here: a record without a filename never reaches the core.
"""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from sitephoto.core.errors import AnnotationInputError
from sitephoto.schemas.models import ActivityRow, MaterialRecord, PhotoAnnotation, Snapshot, TagRecord

logger = logging.getLogger(__name__)

GROUP_FILE = "photo-groups.json"
MATERIAL_FILE = "material-records.jsonl"
TAG_FILE = "photo-tags.json"

# ----------------------------
# photo-groups.json
# ----------------------------


def parse_group_records(data: Any, *, source: str = GROUP_FILE) -> Snapshot:
    if not isinstance(data, dict):
        raise AnnotationInputError(f"{source}: expected an object keyed by filename")
    out: Snapshot = {}
    for fname, rec in data.items():
        if not isinstance(fname, str) or not fname.strip():
            raise AnnotationInputError(f"{source}: record without filename")
        if not isinstance(rec, dict):
            raise AnnotationInputError(f"{source}: record for {fname} is not an object")
        try:
            out[fname] = PhotoAnnotation.model_validate(rec)
        except ValidationError as e:
            raise AnnotationInputError(f"{source}: invalid record for {fname}: {e}") from e
    return out


def load_group_records(base: Path) -> Snapshot:
    """Records from <base>/photo-groups.json; a missing file is an empty snapshot."""
    path = base / GROUP_FILE
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise AnnotationInputError(f"Invalid JSON in {path}: {e}") from e
    return parse_group_records(data, source=str(path))


def save_group_records(base: Path, records: Mapping[str, PhotoAnnotation]) -> Path:
    return _write_records(base / GROUP_FILE, records)


def _write_records(path: Path, records: Mapping[str, BaseModel]) -> Path:
    payload = {f: records[f].model_dump(mode="json") for f in sorted(records)}
    tmp = path.with_suffix(".json.tmp")
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)
    logger.debug("saved %d records to %s", len(payload), path)
    return path


# ----------------------------
# photo-tags.json
# ----------------------------


def load_tag_records(base: Path) -> dict[str, TagRecord]:
    """Category records from <base>/photo-tags.json; a missing file is empty."""
    path = base / TAG_FILE
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise AnnotationInputError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise AnnotationInputError(f"{path}: expected an object keyed by filename")
    out: dict[str, TagRecord] = {}
    for fname, rec in data.items():
        if not fname.strip():
            raise AnnotationInputError(f"{path}: record without filename")
        try:
            out[fname] = TagRecord.model_validate(rec)
        except ValidationError as e:
            raise AnnotationInputError(f"{path}: invalid record for {fname}: {e}") from e
    return out


def save_tag_records(base: Path, records: Mapping[str, TagRecord]) -> Path:
    return _write_records(base / TAG_FILE, records)


# ----------------------------
# JSONL
# ----------------------------


def append_jsonl(path: Path, record: BaseModel | Mapping[str, Any]) -> None:
    data = record.model_dump(mode="json", exclude_none=True) if isinstance(record, BaseModel) else dict(record)
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(data, ensure_ascii=False, separators=(",", ":")) + "\n")


def read_jsonl(path: Path) -> Iterator[dict[str, Any]]:
    """Yield JSON objects; blank lines skipped, broken lines logged and skipped."""
    if not path.exists():
        return
    with path.open(encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            s = line.strip()
            if not s:
                continue
            try:
                obj = json.loads(s)
            except json.JSONDecodeError as e:
                logger.warning("%s:%d: skipping malformed line (%s)", path, lineno, e)
                continue
            if isinstance(obj, dict):
                yield obj


def read_material_records(path: Path) -> list[MaterialRecord]:
    """Latest record per file wins (re-runs append)."""
    latest: dict[str, MaterialRecord] = {}
    for obj in read_jsonl(path):
        try:
            rec = MaterialRecord.model_validate(obj)
        except ValidationError as e:
            logger.warning("%s: skipping invalid material record: %s", path, e)
            continue
        if not rec.file:
            raise AnnotationInputError(f"{path}: material record without filename")
        latest[rec.file] = rec
    return [latest[f] for f in sorted(latest)]


# ----------------------------
# Activity CSV
# ----------------------------

ACTIVITY_CSV_COLUMNS = ("file", "ts", "board_text", "other_text", "notes", "board_lines", "board_fields")


def _parse_ts(raw: str, *, where: str) -> int | None:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return int(float(raw))
    except ValueError as e:
        raise AnnotationInputError(f"{where}: bad timestamp {raw!r}") from e


def _parse_fields(raw: str, *, where: str) -> dict[str, str]:
    raw = (raw or "").strip()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AnnotationInputError(f"{where}: board_fields is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise AnnotationInputError(f"{where}: board_fields must be a JSON object")
    return {str(k): "" if v is None else str(v) for k, v in data.items()}


def read_activity_csv(path: Path) -> list[ActivityRow]:
    """
    Rows with columns file, ts, board_text, other_text, notes, board_lines
    (newline-separated inside the cell) and board_fields (JSON object).
    Only `file` is required.
    """
    if not path.is_file():
        raise AnnotationInputError(f"Activity CSV not found: {path}")
    rows: list[ActivityRow] = []
    with path.open(encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for lineno, rec in enumerate(reader, start=2):
            where = f"{path}:{lineno}"
            file = (rec.get("file") or "").strip()
            if not file:
                raise AnnotationInputError(f"{where}: row without filename")
            rows.append(
                ActivityRow(
                    file=file,
                    ts=_parse_ts(rec.get("ts") or "", where=where),
                    board_text=rec.get("board_text") or "",
                    other_text=rec.get("other_text") or "",
                    notes=rec.get("notes") or "",
                    board_lines=[ln for ln in (rec.get("board_lines") or "").splitlines() if ln.strip()],
                    board_fields=_parse_fields(rec.get("board_fields") or "", where=where),
                )
            )
    return rows


def write_activity_csv(path: Path, rows: Iterable[tuple[str, str]]) -> Path:
    """(file, activity_name) pairs → CSV."""
    with path.open("w", encoding="utf-8", newline="") as f:
        w = csv.writer(f)
        w.writerow(["file", "activity_name"])
        for file, name in rows:
            w.writerow([file, name])
    return path


__all__ = [
    "GROUP_FILE",
    "MATERIAL_FILE",
    "TAG_FILE",
    "ACTIVITY_CSV_COLUMNS",
    "parse_group_records",
    "load_group_records",
    "save_group_records",
    "load_tag_records",
    "save_tag_records",
    "append_jsonl",
    "read_jsonl",
    "read_material_records",
    "read_activity_csv",
    "write_activity_csv",
]
