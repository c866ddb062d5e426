# tests/unit/test_errors_and_logging.py
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sitephoto.core.errors import (
    AnnotationInputError,
    ProviderResponseError,
    SitePhotoError,
    provider_error_guard,
)
from sitephoto.logs import RedactSecretsFilter, configure_logging


def test_guard_wraps_unexpected_exceptions():
    with pytest.raises(ProviderResponseError) as ei:
        with provider_error_guard("a.jpg"):
            raise KeyError("choices")
    assert "a.jpg" in str(ei.value)
    assert isinstance(ei.value.__cause__, KeyError)


def test_guard_passes_boundary_errors_through():
    with pytest.raises(AnnotationInputError):
        with provider_error_guard():
            raise AnnotationInputError("bad record")


def test_error_hierarchy():
    assert issubclass(ProviderResponseError, SitePhotoError)
    assert issubclass(SitePhotoError, RuntimeError)


def test_configure_logging_is_idempotent_and_writes_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "run.log"
    configure_logging("INFO", log_file)
    logger = configure_logging("DEBUG", log_file)
    assert len(logger.handlers) == 2
    assert logger.level == logging.DEBUG

    logging.getLogger("sitephoto.test").info("hello %s", "world")
    for h in logger.handlers:
        h.flush()
    assert "hello world" in log_file.read_text(encoding="utf-8")


def test_redact_filter_hides_api_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-secret-123")
    record = logging.LogRecord("sitephoto", logging.INFO, __file__, 1, "key=%s", ("sk-secret-123",), None)
    assert RedactSecretsFilter().filter(record)
    assert record.getMessage() == "key=[REDACTED]"
