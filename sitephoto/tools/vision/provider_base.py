# sitephoto/tools/vision/provider_base.py
"""
Annotation Provider Interface

Purpose
-------
Define a minimal, provider-agnostic contract for per-photo annotation and a
standard helper to run providers in batch. If a provider implements a native
`annotate_batch`, we use it. Otherwise we fall back to per-image calls.

Public API
----------
class AnnotationProvider(Protocol):
    def annotate(self, path: str) -> RawAnnotation
    # Optional (duck-typed):
    # def annotate_batch(self, paths: list[str]) -> list[RawAnnotation]
    # def extract_material(self, path: str) -> MaterialRecord
    # def tag_batch(self, paths: list[str], categories: list[str]) -> list[dict]

def run_batch(provider, paths) -> list[RawAnnotation]
def to_photo_annotation(raw, captured_at=None) -> PhotoAnnotation

Invariants & Guardrails
-----------------------
- Output of `run_batch` aligns 1:1 with `paths` order.
- An empty record (no "file" key) means the provider returned nothing for that
  image; callers skip it so a re-run retries it.
- Retry/backoff belongs to the provider, never to the reasoning core.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, TypedDict

from sitephoto.core.errors import ProviderResponseError
from sitephoto.schemas.models import PhotoAnnotation


class RawObject(TypedDict, total=False):
    label: str
    bbox: dict[str, float]
    area_ratio: float


class RawAnnotation(TypedDict, total=False):
    file: str
    identity: str
    role: str
    machine_type: str
    detected_text: str
    description: str
    has_board: bool
    objects: list[RawObject]
    board_fields: dict[str, str]
    board_lines: list[str]


class AnnotationProvider(Protocol):
    def annotate(self, path: str) -> RawAnnotation: ...

    # NOTE: Providers may optionally implement this for efficiency.
    # def annotate_batch(self, paths: list[str]) -> list[RawAnnotation]:
    #     ...


def run_batch(provider: AnnotationProvider, paths: Sequence[str]) -> list[RawAnnotation]:
    """
    Annotate a batch of images, preserving input order.
    If provider exposes `annotate_batch`, use it; otherwise loop over `annotate`.
    """
    annotate_batch = getattr(provider, "annotate_batch", None)
    if callable(annotate_batch):
        out = annotate_batch(list(paths))
        if not isinstance(out, list) or len(out) != len(paths):
            raise ProviderResponseError("Provider annotate_batch returned invalid shape.")
        return out
    return [provider.annotate(p) for p in paths]


def to_photo_annotation(raw: RawAnnotation | dict[str, Any], captured_at: int | None = None) -> PhotoAnnotation:
    """Validate a provider record into a PhotoAnnotation; `file` is dropped (it is the snapshot key)."""
    data = {k: v for k, v in dict(raw).items() if k != "file"}
    if captured_at is not None:
        data["captured_at"] = captured_at
    data["group"] = 0
    try:
        return PhotoAnnotation.model_validate(data)
    except ValueError as e:
        raise ProviderResponseError(f"Invalid annotation for {raw.get('file', '?')}: {e}") from e
