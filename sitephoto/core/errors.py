# sitephoto/core/errors.py
"""
Typed errors for the I/O boundary around the reasoning core.

The core passes (identity, grouping, activity, scene) are total over their inputs
and raise nothing of their own. Everything here is raised where data enters or
leaves the process: record files, provider responses, settings files.

Exports
-------
- SitePhotoError, AnnotationInputError, ProviderResponseError, SettingsError
- BOUNDARY_ERRORS
- provider_error_guard(path)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

# =========================
# Exception types
# =========================


class SitePhotoError(RuntimeError):
    """Base class for sitephoto failures."""


class AnnotationInputError(SitePhotoError):
    """An upstream annotation record is malformed (e.g. missing filename)."""


class ProviderResponseError(SitePhotoError):
    """The annotation provider failed or returned output that cannot be parsed."""


class SettingsError(SitePhotoError):
    """A settings file or override could not be loaded or validated."""


BOUNDARY_ERRORS = (
    AnnotationInputError,
    ProviderResponseError,
    SettingsError,
)


@contextmanager
def provider_error_guard(path: str = "") -> Iterator[None]:
    """Map unexpected provider exceptions to ProviderResponseError."""
    try:
        yield
    except BOUNDARY_ERRORS:
        raise
    except Exception as exc:  # noqa: BLE001
        where = f" for {path}" if path else ""
        raise ProviderResponseError(f"{type(exc).__name__}{where}: {exc}") from exc


__all__ = [
    "SitePhotoError",
    "AnnotationInputError",
    "ProviderResponseError",
    "SettingsError",
    "BOUNDARY_ERRORS",
    "provider_error_guard",
]
