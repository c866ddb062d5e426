# sitephoto/inputs/settings.py
"""
Settings loader for sitephoto.

Goals
-----
- File-first settings with validation via Pydantic; every field has a default, so
  running without a settings file is the normal case.
- Two profiles of the same engine: machine grouping (5-minute segment gap) and
  activity folders (10-minute carry gap). They stay separate because the business
  intent differs (machine identity vs. free-text activity).
- Minimal environment-variable overrides for CI/CLI convenience.

JSON shape
----------
{
  "grouping": {"segment_gap_s": 300},
  "activity": {"gap_minutes": 10, "top_k": 2},
  "scene": {"include_electronic_board": false, "board_threshold": 0.15,
            "measure_threshold": 0.25, "measure_lexicon_path": "measure.txt"},
  "run": {"provider": "mock", "batch_size": 10, "max_concurrent": 3,
          "log_level": "INFO", "log_file": null}
}

Environment overrides (optional)
--------------------------------
- SITEPHOTO_GAP_SECONDS     -> grouping.segment_gap_s (int)
- SITEPHOTO_GAP_MINUTES     -> activity.gap_minutes (int)
- SITEPHOTO_MEASURE_LEXICON -> scene.measure_lexicon_path
- SITEPHOTO_PROVIDER        -> run.provider ("mock" | "openai")
- SITEPHOTO_BATCH_SIZE      -> run.batch_size (int)
- SITEPHOTO_LOG_LEVEL       -> run.log_level (an unknown level is an error)

Notes
-----
The attachment-road keyword is a fixed domain term and deliberately not a setting.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, cast

from pydantic import BaseModel, Field, ValidationError, field_validator

from sitephoto.core.activity import DEFAULT_GAP_MINUTES, DEFAULT_TOP_K
from sitephoto.core.errors import SettingsError
from sitephoto.core.grouping import DEFAULT_SEGMENT_GAP_S
from sitephoto.core.scene import DEFAULT_BOARD_THRESHOLD, DEFAULT_MEASURE_THRESHOLD, default_measure_labels
from sitephoto.schemas.labels import UNCLASSIFIED_ACTIVITY

logger = logging.getLogger(__name__)

ProviderChoice = Literal["mock", "openai"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# ----------------------------
# Pydantic models
# ----------------------------


class GroupingSettings(BaseModel):
    """Machine / station grouping profile."""

    segment_gap_s: int = Field(DEFAULT_SEGMENT_GAP_S, ge=0, description="Split a segment when consecutive photos are further apart.")


class ActivitySettings(BaseModel):
    """Activity-folder profile."""

    gap_minutes: int = Field(DEFAULT_GAP_MINUTES, ge=0, description="Carry the previous activity across gaps shorter than this.")
    top_k: int = Field(DEFAULT_TOP_K, ge=1, le=5, description="Keywords joined into one folder name.")
    fallback_label: str = Field(UNCLASSIFIED_ACTIVITY, min_length=1, description="Name used when nothing matches.")


class SceneSettings(BaseModel):
    include_electronic_board: bool = Field(False, description="Count electronic boards as boards.")
    board_threshold: float = Field(DEFAULT_BOARD_THRESHOLD, ge=0, le=1, description="Board area ratio for board_with_measure.")
    measure_threshold: float = Field(DEFAULT_MEASURE_THRESHOLD, ge=0, le=1, description="Measure area ratio for measure_closeup.")
    measure_lexicon: list[str] = Field(default_factory=default_measure_labels, description="Measure terms matched against labels.")
    measure_lexicon_path: str | None = Field(None, description="Text file replacing measure_lexicon (one term per line).")


class RunSettings(BaseModel):
    """Runtime options for the annotate/group run."""

    provider: ProviderChoice = Field("mock", description='Annotation provider: "mock" or "openai".')
    batch_size: int = Field(10, ge=1, le=50, description="Images per provider call.")
    max_concurrent: int = Field(3, ge=1, le=16, description="Provider batches in flight.")
    log_level: LogLevel = Field("INFO", description="Package log level.")
    log_file: str | None = Field(None, description="Optional rotating log file.")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class AppSettings(BaseModel):
    grouping: GroupingSettings = Field(default_factory=GroupingSettings)
    activity: ActivitySettings = Field(default_factory=ActivitySettings)
    scene: SceneSettings = Field(default_factory=SceneSettings)
    run: RunSettings = Field(default_factory=RunSettings)

    def resolved_measure_lexicon(self) -> list[str]:
        """Lexicon from measure_lexicon_path when set, else the inline list."""
        if self.scene.measure_lexicon_path:
            return load_measure_lexicon(Path(self.scene.measure_lexicon_path))
        return list(self.scene.measure_lexicon)


# ----------------------------
# Overrides
# ----------------------------


def with_overrides(cfg: AppSettings, section: str, **updates: Any) -> AppSettings:
    """
    Copy of cfg with fields of one section replaced.

    The section is rebuilt through model_validate with the same bounds as a settings
    file; a value out of bounds raises SettingsError.
    """
    if not updates:
        return cfg
    current = getattr(cfg, section)
    try:
        rebuilt = type(current).model_validate({**current.model_dump(), **updates})
    except ValidationError as e:
        raise SettingsError(f"Invalid {section} override:\n{e}") from e
    return cfg.model_copy(update={section: rebuilt})


# ----------------------------
# Lexicon resource
# ----------------------------


def parse_measure_lexicon(text: str) -> list[str]:
    """One term per non-empty line; lines starting with '#' are comments."""
    out: list[str] = []
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        out.append(s)
    return out


def load_measure_lexicon(path: Path) -> list[str]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SettingsError(f"Cannot read measure lexicon {path}: {e}") from e
    terms = parse_measure_lexicon(text)
    if not terms:
        logger.warning("measure lexicon %s is empty; no object will count as a measure", path)
    return terms


# ----------------------------
# Loader
# ----------------------------


@dataclass(frozen=True)
class SettingsLoader:
    """
    File-first settings loader with light env overrides.

    Default search (when path=None):
        1) ./sitephoto.json
        2) built-in defaults
    """

    env_prefix: str = "SITEPHOTO_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> AppSettings:
        p = self._resolve_path(path)
        raw = self._read_json_file(p) if p is not None else {}
        cfg = self._parse_root(raw)
        return self._apply_env_overrides(cfg)

    def load_json(self, text: str) -> AppSettings:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise SettingsError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise SettingsError("Settings JSON must be an object.")
        return self._apply_env_overrides(self._parse_root(raw))

    # ---------- Internals ----------

    def _resolve_path(self, path: str | Path | None) -> Path | None:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise SettingsError(f"Settings file not found: {p}")
            return p
        candidate = Path("sitephoto.json")
        return candidate if candidate.exists() else None

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SettingsError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(raw, dict):
            raise SettingsError(f"Settings root in {p} must be an object.")
        return cast(dict[str, Any], raw)

    def _parse_root(self, data: dict[str, Any]) -> AppSettings:
        try:
            return AppSettings.model_validate(data)
        except ValidationError as e:
            raise SettingsError(f"Settings validation failed:\n{e}") from e

    def _env_int(self, name: str) -> int | None:
        val = os.getenv(f"{self.env_prefix}{name}")
        if not val:
            return None
        try:
            return int(val)
        except ValueError:
            logger.warning("ignoring non-integer %s%s=%r", self.env_prefix, name, val)
            return None

    def _apply_env_overrides(self, cfg: AppSettings) -> AppSettings:
        prefix = self.env_prefix

        gap_s = self._env_int("GAP_SECONDS")
        if gap_s is not None and gap_s >= 0:
            cfg = with_overrides(cfg, "grouping", segment_gap_s=gap_s)

        gap_min = self._env_int("GAP_MINUTES")
        if gap_min is not None and gap_min >= 0:
            cfg = with_overrides(cfg, "activity", gap_minutes=gap_min)

        lexicon = os.getenv(f"{prefix}MEASURE_LEXICON")
        if lexicon:
            cfg = with_overrides(cfg, "scene", measure_lexicon_path=lexicon)

        run_updates: dict[str, Any] = {}
        provider = os.getenv(f"{prefix}PROVIDER")
        if provider:
            normalized = provider.strip().lower()
            if normalized in ("mock", "openai"):
                run_updates["provider"] = normalized
        batch = self._env_int("BATCH_SIZE")
        if batch is not None and 1 <= batch <= 50:
            run_updates["batch_size"] = batch
        level = os.getenv(f"{prefix}LOG_LEVEL")
        if level:
            run_updates["log_level"] = level

        return with_overrides(cfg, "run", **run_updates)


def load_settings(path: str | Path | None = None) -> AppSettings:
    """Convenience wrapper for one-shot callers."""
    return SettingsLoader().load(path)
