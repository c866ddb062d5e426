# sitephoto/tools/vision/response.py
"""
Tolerant parsing of model output into annotation records.

Models wrap JSON in code fences or prose; these helpers strip that and keep only
well-formed items. Schema validation happens later (`to_photo_annotation`).
"""

from __future__ import annotations

import json
import re
from typing import Any

from sitephoto.core.errors import ProviderResponseError
from sitephoto.schemas.models import MaterialRecord

from .provider_base import RawAnnotation

_FENCE_HEAD_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_TAIL_RE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    s = text.strip()
    if s.startswith("```"):
        s = _FENCE_HEAD_RE.sub("", s, count=1)
        s = _FENCE_TAIL_RE.sub("", s, count=1)
    return s


def extract_json_array(text: str) -> str | None:
    """Substring from the first '[' to the last ']', or None."""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def extract_json_object(text: str) -> str | None:
    """Substring from the first '{' to the last '}', or None."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def _load_items(text: str) -> list[Any]:
    if not isinstance(text, str):
        raise ProviderResponseError("Provider returned non-string response.")
    s = strip_code_fences(text)
    candidates = [s, extract_json_array(s), extract_json_object(s)]
    for cand in candidates:
        if not cand:
            continue
        try:
            loaded = json.loads(cand)
        except json.JSONDecodeError:
            continue
        if isinstance(loaded, dict):
            return [loaded]
        if isinstance(loaded, list):
            return loaded
    raise ProviderResponseError(f"No JSON array/object in provider output: {s[:200]!r}")


def _as_str(v: Any) -> str:
    return v if isinstance(v, str) else ""


def _raw_objects(items: Any) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    if not isinstance(items, list):
        return out
    for it in items:
        if isinstance(it, str) and it.strip():
            out.append({"label": it.strip()})
            continue
        if not isinstance(it, dict) or not isinstance(it.get("label"), str):
            continue
        obj: dict[str, Any] = {"label": it["label"]}
        try:
            obj["area_ratio"] = min(max(float(it.get("area_ratio", 0.0) or 0.0), 0.0), 1.0)
        except (TypeError, ValueError):
            obj["area_ratio"] = 0.0
        bbox = it.get("bbox")
        if isinstance(bbox, dict):
            try:
                obj["bbox"] = {k: min(max(float(bbox.get(k, 0.0)), 0.0), 1.0) for k in ("x", "y", "w", "h")}
            except (TypeError, ValueError):
                pass
        out.append(obj)
    return out


def parse_annotation_json(text: str) -> list[RawAnnotation]:
    """
    Provider output → RawAnnotation items. Items without a filename are dropped;
    `machine_id` is accepted as the identity key.
    """
    out: list[RawAnnotation] = []
    for item in _load_items(text):
        if not isinstance(item, dict):
            continue
        file = _as_str(item.get("file")).strip()
        if not file:
            continue
        fields = item.get("board_fields")
        lines = item.get("board_lines")
        rec: RawAnnotation = {
            "file": file,
            "identity": _as_str(item.get("identity") or item.get("machine_id")),
            "role": _as_str(item.get("role")),
            "machine_type": _as_str(item.get("machine_type")),
            "detected_text": _as_str(item.get("detected_text")),
            "description": _as_str(item.get("description")),
            "has_board": bool(item.get("has_board", False)),
            "objects": _raw_objects(item.get("objects")),  # type: ignore[typeddict-item]
            "board_fields": {str(k): _as_str(v) for k, v in fields.items()} if isinstance(fields, dict) else {},
            "board_lines": [ln for ln in lines if isinstance(ln, str)] if isinstance(lines, list) else [],
        }
        out.append(rec)
    return out


def parse_tag_json(text: str) -> list[dict[str, Any]]:
    """
    Tagging output to raw {"file", "tag", "confidence"} items. Items without a filename
    or tag are dropped; validation against the category list is the caller's job.
    """
    out: list[dict[str, Any]] = []
    for item in _load_items(text):
        if not isinstance(item, dict):
            continue
        file = _as_str(item.get("file")).strip()
        tag = _as_str(item.get("tag")).strip()
        if not file or not tag:
            continue
        out.append({"file": file, "tag": tag, "confidence": item.get("confidence", 0.0)})
    return out


def parse_material_json(text: str) -> MaterialRecord:
    """Single material record; missing fields become empty values."""
    obj = extract_json_object(strip_code_fences(text))
    if obj is None:
        raise ProviderResponseError("No JSON object in response")
    try:
        data = json.loads(obj)
    except json.JSONDecodeError as e:
        raise ProviderResponseError(f"Failed to parse material JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProviderResponseError("Material JSON must be an object.")
    try:
        return MaterialRecord.model_validate(data)
    except ValueError as e:
        raise ProviderResponseError(f"Invalid material record: {e}") from e


__all__ = [
    "strip_code_fences",
    "extract_json_array",
    "extract_json_object",
    "parse_annotation_json",
    "parse_material_json",
    "parse_tag_json",
]
