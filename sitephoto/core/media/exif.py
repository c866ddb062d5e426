# sitephoto/core/media/exif.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

_EXIF_IFD = 0x8769
_TAG_DATETIME_ORIGINAL = 36867
_TAG_DATETIME_DIGITIZED = 36868
_TAG_DATETIME = 306
_EXIF_FORMAT = "%Y:%m:%d %H:%M:%S"


def parse_exif_datetime(value: object) -> int | None:
    """
    "YYYY:MM:DD HH:MM:SS" → Unix seconds. Camera clocks carry no zone, so the value
    is read as UTC; only differences between photos matter downstream.
    """
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None
    s = value.strip().rstrip("\x00")
    try:
        dt = datetime.strptime(s, _EXIF_FORMAT)
    except ValueError:
        return None
    return int(dt.replace(tzinfo=timezone.utc).timestamp())


def read_captured_at(path: Path) -> int | None:
    """
    Capture time from EXIF (DateTimeOriginal, then DateTimeDigitized, then DateTime).
    Never raises; unreadable files and missing tags yield None ("unknown").
    """
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            sub = exif.get_ifd(_EXIF_IFD)
            for raw in (sub.get(_TAG_DATETIME_ORIGINAL), sub.get(_TAG_DATETIME_DIGITIZED), exif.get(_TAG_DATETIME)):
                ts = parse_exif_datetime(raw)
                if ts is not None:
                    return ts
    except (FileNotFoundError, UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug("no EXIF timestamp for %s: %s", path, e)
    return None
