# tests/core/identity/test_station_identity.py
from __future__ import annotations

import pytest

from sitephoto.core.identity import (
    attachment_identity,
    extract_station_number,
    has_attachment_hint,
    normalize_identities,
    normalize_identity,
    station_number_of,
)
from tests.utils import ATTACH, make_annotation


@pytest.mark.parametrize("text", ["No.12", "No 12", "NO.12", "NO 12", "測点 No.12 付近", "No. 12"])
def test_station_marker_variants_extract_same_number(text):
    assert extract_station_number(text) == "No.12"


@pytest.mark.parametrize("text", ["No.abc", "", "測点12", "no.12", "No."])
def test_station_marker_without_digits_or_marker(text):
    assert extract_station_number(text) is None


def test_earliest_marker_wins_and_first_digit_run_is_taken():
    assert extract_station_number("NO 7 then No.9") == "No.7"
    assert extract_station_number("No.12-3") == "No.12"
    # digits may come later in the text; the first run after the marker is used
    assert extract_station_number("No.付近 45m") == "No.45"


def test_hint_is_read_from_identity_or_detected_text_only():
    assert has_attachment_hint(make_annotation(ATTACH))
    assert has_attachment_hint(make_annotation("X", text=f"{ATTACH} No.3"))
    assert not has_attachment_hint(make_annotation("X", description=ATTACH))


def test_station_number_lookup_order():
    ann = make_annotation("No.1", text="No.2", description="No.3")
    assert station_number_of(ann) == "No.1"
    assert station_number_of(make_annotation("TZ703", text="", description="測点 NO 3")) == "No.3"
    assert station_number_of(make_annotation("TZ703")) is None


def test_normalize_rewrites_attachment_photo_from_text():
    ann = make_annotation("TZ703", text=f"{ATTACH} 測点 No.12")
    assert normalize_identity(ann) == f"{ATTACH} No.12"


def test_normalize_uses_description_and_falls_back_to_identity_marker():
    ann = make_annotation("No.5", description=f"{ATTACH}の状況")
    assert normalize_identity(ann) == attachment_identity("No.5")


def test_normalize_leaves_identity_when_keyword_or_digits_missing():
    assert normalize_identity(make_annotation("TZ703", text="No.12")) == "TZ703"
    assert normalize_identity(make_annotation("TZ703", text=f"{ATTACH} No.abc")) == "TZ703"
    # keyword only in the identity is not enough
    assert normalize_identity(make_annotation(f"{ATTACH}", text="No.4")) == ATTACH


@pytest.mark.parametrize(
    "ann",
    [
        make_annotation("TZ703", text=f"{ATTACH} No.12"),
        make_annotation(f"{ATTACH} No.12", text=f"{ATTACH} No.12"),
        make_annotation("No.5", description=ATTACH),
        make_annotation("plain"),
    ],
)
def test_normalize_is_idempotent(ann):
    once = normalize_identity(ann)
    twice = normalize_identity(ann.model_copy(update={"identity": once}))
    assert twice == once


def test_normalize_identities_returns_new_snapshot():
    snap = {
        "a.jpg": make_annotation("TZ703", text=f"{ATTACH} No.12"),
        "b.jpg": make_annotation("BW120"),
    }
    out = normalize_identities(snap)
    assert out["a.jpg"].identity == f"{ATTACH} No.12"
    assert out["b.jpg"] is snap["b.jpg"]
    # input untouched
    assert snap["a.jpg"].identity == "TZ703"
