# sitephoto/tools/vision/mock_provider.py
"""
Mock Annotation Provider

Purpose
-------
Provide a deterministic, zero-dependency provider that returns plausible
annotations for known filename patterns. This lets us:
  - Run the whole annotate → group → name → scene flow without network.
  - Keep CI stable and fast.

Design
------
- Pure string-pattern rules over the image *filename* (not pixels).
- Filename tokens are separated by "_"; recognized patterns:
    m-<id>            identity (machine id), e.g. m-TZ703
    no<digits>        station number → "No.<digits>" in detected_text
    tsuke             attachment-road photo (keyword in detected_text)
    board / eboard    physical / electronic board object (area 0.20)
    measure           tape-measure object (area 0.30 with "close", else 0.05)
    overview|tag|plate  machine photo roles
    <activity term>   allowlisted activity term (e.g. 設置状況) as a board line
- Tagging: the longest category name contained in the filename stem wins
  (confidence 0.9); a name matching no category stays untagged.
- Unknown names still yield a valid, empty annotation.

Notes
-----
- This provider *does not* read image bytes; it is intentionally a stub.
- The real provider can be swapped in without touching callers.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

from sitephoto.schemas.labels import ACTIVITY_ALLOWLIST, ATTACHMENT_ROAD_KEYWORD, MachineRole
from sitephoto.schemas.models import MaterialRecord

from .provider_base import AnnotationProvider, RawAnnotation, RawObject

_STATION_RE = re.compile(r"^no(\d+)$")


class MockAnnotationProvider(AnnotationProvider):
    """Deterministic, filename-based mock provider."""

    def annotate(self, path: str) -> RawAnnotation:
        p = Path(path)
        tokens = p.stem.lower().split("_")
        texts: list[str] = []
        objects: list[RawObject] = []
        lines: list[str] = []
        identity = ""
        role = ""

        for tok in tokens:
            if tok.startswith("m-") and len(tok) > 2:
                identity = tok[2:].upper()
            elif m := _STATION_RE.match(tok):
                texts.append(f"測点 No.{m.group(1)}")
            elif tok == "tsuke":
                texts.append(ATTACHMENT_ROAD_KEYWORD)
            elif tok == "board":
                objects.append(_obj("黒板", 0.20))
            elif tok == "eboard":
                objects.append(_obj("電子黒板", 0.20))
            elif tok == "measure":
                objects.append(_obj("tape measure", 0.30 if "close" in tokens else 0.05))
            elif tok == "overview":
                role = MachineRole.overview.value
            elif tok == "tag":
                role = MachineRole.inspection_tag.value
            elif tok == "plate":
                role = MachineRole.number_plate.value
            elif tok in ACTIVITY_ALLOWLIST:
                lines.append(tok)

        return {
            "file": p.name,
            "identity": identity,
            "role": role,
            "machine_type": "",
            "detected_text": " ".join(texts),
            "description": "",
            "has_board": any(o["label"] in ("黒板", "電子黒板") for o in objects),
            "objects": objects,
            "board_fields": {},
            "board_lines": lines,
        }

    def extract_material(self, path: str) -> MaterialRecord:
        ann = self.annotate(path)
        return MaterialRecord(
            file=ann["file"],
            objects=[o["label"] for o in ann["objects"]],
            board_text="\n".join([ann["detected_text"], *ann["board_lines"]]).strip(),
            notes=ann["description"],
        )

    def tag_batch(self, paths: Sequence[str], categories: Sequence[str]) -> list[dict[str, object]]:
        out: list[dict[str, object]] = []
        for path in paths:
            p = Path(path)
            stem = p.stem.lower()
            hits = [c for c in categories if c and c.lower() in stem]
            if not hits:
                out.append({})
                continue
            best = max(hits, key=len)
            out.append({"file": p.name, "tag": best, "confidence": 0.9})
        return out


def _obj(label: str, area: float) -> RawObject:
    return {"label": label, "bbox": {"x": 0.1, "y": 0.1, "w": area, "h": 1.0}, "area_ratio": area}
