# tests/unit/test_settings.py
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from sitephoto.core.errors import SettingsError
from sitephoto.inputs.settings import (
    AppSettings,
    SettingsLoader,
    load_measure_lexicon,
    load_settings,
    parse_measure_lexicon,
    with_overrides,
)
from sitephoto.schemas.labels import DEFAULT_MEASURE_LABELS


def test_defaults_without_any_file():
    cfg = load_settings()
    assert cfg.grouping.segment_gap_s == 300
    assert cfg.activity.gap_minutes == 10
    assert cfg.activity.top_k == 2
    assert cfg.scene.board_threshold == pytest.approx(0.15)
    assert cfg.scene.measure_threshold == pytest.approx(0.25)
    assert cfg.run.provider == "mock"
    assert cfg.run.batch_size == 10 and cfg.run.max_concurrent == 3
    assert cfg.resolved_measure_lexicon() == list(DEFAULT_MEASURE_LABELS)


def test_cwd_settings_file_is_picked_up(tmp_path: Path):
    # conftest chdirs into tmp_path
    (tmp_path / "sitephoto.json").write_text(json.dumps({"grouping": {"segment_gap_s": 120}}), encoding="utf-8")
    assert SettingsLoader().load().grouping.segment_gap_s == 120


def test_explicit_path_partial_sections(tmp_path: Path):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps({"activity": {"gap_minutes": 5, "fallback_label": "その他"}}), encoding="utf-8")
    cfg = SettingsLoader().load(p)
    assert cfg.activity.gap_minutes == 5
    assert cfg.activity.fallback_label == "その他"
    assert cfg.grouping.segment_gap_s == 300


def test_missing_explicit_path_raises(tmp_path: Path):
    with pytest.raises(SettingsError):
        SettingsLoader().load(tmp_path / "nope.json")


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        "[1, 2]",
        json.dumps({"run": {"batch_size": 0}}),
        json.dumps({"run": {"provider": "gemini"}}),
        json.dumps({"scene": {"board_threshold": 1.5}}),
    ],
)
def test_invalid_payloads_raise_settings_error(payload):
    with pytest.raises(SettingsError):
        SettingsLoader().load_json(payload)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SITEPHOTO_GAP_SECONDS", "60")
    monkeypatch.setenv("SITEPHOTO_GAP_MINUTES", "15")
    monkeypatch.setenv("SITEPHOTO_PROVIDER", " OpenAI ")
    monkeypatch.setenv("SITEPHOTO_BATCH_SIZE", "5")
    monkeypatch.setenv("SITEPHOTO_LOG_LEVEL", "debug")
    cfg = SettingsLoader().load_json("{}")
    assert cfg.grouping.segment_gap_s == 60
    assert cfg.activity.gap_minutes == 15
    assert cfg.run.provider == "openai"
    assert cfg.run.batch_size == 5
    assert cfg.run.log_level == "DEBUG"


def test_bad_env_values_are_ignored(monkeypatch: pytest.MonkeyPatch, caplog):
    monkeypatch.setenv("SITEPHOTO_GAP_SECONDS", "soon")
    monkeypatch.setenv("SITEPHOTO_BATCH_SIZE", "500")
    monkeypatch.setenv("SITEPHOTO_PROVIDER", "gemini")
    with caplog.at_level(logging.WARNING, logger="sitephoto"):
        cfg = SettingsLoader().load_json("{}")
    assert cfg.grouping.segment_gap_s == 300
    assert cfg.run.batch_size == 10
    assert cfg.run.provider == "mock"
    assert "SITEPHOTO_GAP_SECONDS" in caplog.text


def test_custom_env_prefix(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SP_GAP_SECONDS", "42")
    assert SettingsLoader(env_prefix="SP_").load_json("{}").grouping.segment_gap_s == 42


def test_measure_lexicon_resource(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    lex = tmp_path / "measure.txt"
    lex.write_text("# tools\nfolding rule\n\n  スケール  \n", encoding="utf-8")
    monkeypatch.setenv("SITEPHOTO_MEASURE_LEXICON", str(lex))
    cfg = SettingsLoader().load_json("{}")
    assert cfg.resolved_measure_lexicon() == ["folding rule", "スケール"]


def test_measure_lexicon_parse_and_errors(tmp_path: Path, caplog):
    assert parse_measure_lexicon("a\n#b\n\n c ") == ["a", "c"]
    with pytest.raises(SettingsError):
        load_measure_lexicon(tmp_path / "missing.txt")
    empty = tmp_path / "empty.txt"
    empty.write_text("# nothing\n", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="sitephoto"):
        assert load_measure_lexicon(empty) == []
    assert "empty" in caplog.text


def test_log_level_is_normalized_and_checked(monkeypatch: pytest.MonkeyPatch):
    assert SettingsLoader().load_json(json.dumps({"run": {"log_level": " debug"}})).run.log_level == "DEBUG"
    with pytest.raises(SettingsError):
        SettingsLoader().load_json(json.dumps({"run": {"log_level": "verbose"}}))

    monkeypatch.setenv("SITEPHOTO_LOG_LEVEL", "verbose")
    with pytest.raises(SettingsError, match="run"):
        SettingsLoader().load_json("{}")


def test_overrides_are_validated_like_the_settings_file():
    cfg = AppSettings()
    assert with_overrides(cfg, "grouping") is cfg
    assert with_overrides(cfg, "grouping", segment_gap_s=60).grouping.segment_gap_s == 60
    assert cfg.grouping.segment_gap_s == 300

    for section, updates in [
        ("grouping", {"segment_gap_s": -5}),
        ("activity", {"gap_minutes": -1}),
        ("activity", {"top_k": 9}),
        ("run", {"log_level": "loud"}),
    ]:
        with pytest.raises(SettingsError, match=f"Invalid {section} override"):
            with_overrides(cfg, section, **updates)
