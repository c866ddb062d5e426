# sitephoto/tools/vision/__init__.py
"""
Vision tools package

Re-exports the provider interface, the mock provider and the response parsers, so
callers can do:

    from sitephoto.tools.vision import AnnotationProvider, MockAnnotationProvider, run_batch

The OpenAI provider is imported lazily by `get_provider("openai")`; the `openai`
package is an optional extra.
"""

from __future__ import annotations

from .mock_provider import MockAnnotationProvider
from .provider_base import AnnotationProvider, RawAnnotation, RawObject, run_batch, to_photo_annotation
from .response import extract_json_array, extract_json_object, parse_annotation_json, parse_material_json, parse_tag_json


def get_provider(name: str) -> AnnotationProvider:
    name = name.strip().lower()
    if name == "mock":
        return MockAnnotationProvider()
    if name == "openai":
        from .openai_provider import OpenAIAnnotationProvider

        return OpenAIAnnotationProvider()
    raise ValueError(f"Unknown annotation provider: {name!r}")


__all__ = [
    "AnnotationProvider",
    "RawAnnotation",
    "RawObject",
    "MockAnnotationProvider",
    "get_provider",
    "run_batch",
    "to_photo_annotation",
    "extract_json_array",
    "extract_json_object",
    "parse_annotation_json",
    "parse_material_json",
    "parse_tag_json",
]
