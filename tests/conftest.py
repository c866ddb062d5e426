# tests/conftest.py
from __future__ import annotations

import logging
import os
import random
from pathlib import Path

import pytest

from sitephoto.inputs.settings import AppSettings, with_overrides
from tests.utils import write_image


# -------- Global deterministic seed --------
@pytest.fixture(autouse=True, scope="session")
def _seed_session():
    random.seed(1337)
    os.environ.setdefault("PYTHONHASHSEED", "0")
    yield


# -------- Isolation from the developer's environment --------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """No SITEPHOTO_* overrides leak in, and ./sitephoto.json is never picked up."""
    for key in list(os.environ):
        if key.startswith("SITEPHOTO_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """configure_logging() detaches the package logger from root; undo so caplog keeps working."""
    yield
    logger = logging.getLogger("sitephoto")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# -------- Settings fixtures --------
@pytest.fixture
def settings_factory():
    """Factory for AppSettings with per-section overrides."""

    def _factory(**sections):
        cfg = AppSettings()
        for name, vals in sections.items():
            cfg = with_overrides(cfg, name, **vals)
        return cfg

    return _factory


# -------- Photo folder fixtures --------
@pytest.fixture
def machine_photo_dir(tmp_path: Path) -> Path:
    """
    Folder the mock provider understands (no EXIF, so every timestamp is unknown).

    Files created:
      - m-tz703_overview.jpg / m-tz703_tag.jpg / m-tz703_plate.jpg → identity TZ703
      - m-bw120_overview.jpg / m-bw120_tag.jpg                     → identity BW120
      - notes.txt                                                   → ignored (not an image)
    """
    pdir = tmp_path / "photos"
    for name in (
        "m-tz703_overview.jpg",
        "m-tz703_tag.jpg",
        "m-tz703_plate.jpg",
        "m-bw120_overview.jpg",
        "m-bw120_tag.jpg",
    ):
        write_image(pdir / name)
    (pdir / "notes.txt").write_text("not a photo", encoding="utf-8")
    return pdir


@pytest.fixture
def station_photo_dir(tmp_path: Path) -> Path:
    """
    Station photos with EXIF times one minute apart:
      - no12_tsuke_board.jpg       09:00 attachment-road keyword + station 12
      - no12_board_measure.jpg     09:01 station 12 only
      - no12_measure_close.jpg     09:02 station 12 only, measure close-up
    """
    pdir = tmp_path / "stations"
    write_image(pdir / "no12_tsuke_board.jpg", exif_datetime="2024:05:01 09:00:00")
    write_image(pdir / "no12_board_measure.jpg", exif_datetime="2024:05:01 09:01:00")
    write_image(pdir / "no12_measure_close.jpg", exif_datetime="2024:05:01 09:02:00")
    return pdir


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: marks integration tests")
