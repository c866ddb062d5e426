# tests/__init__.py
"""
Test package. Shared factories live in tests.utils:
    from tests.utils import make_annotation, make_records, make_row
"""

from .utils import make_annotation, make_records, make_row

__all__ = ["make_annotation", "make_records", "make_row"]
