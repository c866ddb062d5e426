# sitephoto/core/media/__init__.py
from .exif import parse_exif_datetime, read_captured_at

__all__ = ["parse_exif_datetime", "read_captured_at"]
