# tests/core/activity/test_namer.py
from __future__ import annotations

import pytest

from sitephoto.core.activity import best_text, classify_activity, infer_activity_with_gap, name_from_fields
from sitephoto.schemas.models import ActivityFrame
from tests.utils import make_row

# -------- Structured fields --------


def test_metadata_fields_only_yield_nothing():
    assert name_from_fields({"工事名": "市道改良工事", "工種": "舗装工", "測点": "No.3"}) is None


def test_role_keys_dropped_and_two_keys_joined_in_sorted_order():
    fields = {"立会者": "山田", "舗装転圧": "", "乳剤散布": ""}
    assert name_from_fields(fields) == "乳剤散布_舗装転圧"


def test_single_key_with_and_without_value():
    assert name_from_fields({"作業内容": "転圧"}) == "作業内容_転圧"
    assert name_from_fields({"確認事項": ""}) == "確認事項"


def test_numeric_values_are_not_activity_names():
    assert name_from_fields({"温度": "145℃"}) is None
    assert name_from_fields({"温度": "145℃", "作業": "転圧"}) == "作業_転圧"


def test_keys_are_stripped_before_filtering():
    assert name_from_fields({" 工事名 ": "x", " 作業 ": " 清掃 "}) == "作業_清掃"


# -------- Text sources --------


def test_best_text_prefers_lines_then_board_and_other_then_notes():
    assert best_text(make_row("a", lines=["設置状況", " "], board_text="掘削", notes="清掃")) == "設置状況"
    assert best_text(make_row("a", board_text="掘削", other_text="転圧", notes="清掃")) == "掘削\n転圧"
    assert best_text(make_row("a", notes="清掃")) == "清掃"


def test_fields_win_over_text():
    row = make_row("a", fields={"作業": "転圧"}, lines=["設置状況"])
    assert classify_activity(row, None) == "作業_転圧"


# -------- Gap carry --------


@pytest.mark.parametrize("offset_min,expected", [(9, "A"), (11, "unclassified")])
def test_gap_carry_boundary(offset_min, expected):
    previous = ActivityFrame(activity="A", ts=1000)
    row = make_row("b.jpg", 1000 + offset_min * 60)
    assert classify_activity(row, previous, gap_minutes=10) == expected


def test_gap_equal_to_threshold_does_not_carry():
    previous = ActivityFrame(activity="A", ts=1000)
    assert classify_activity(make_row("b.jpg", 1600), previous, gap_minutes=10) == "unclassified"


def test_scan_carries_through_a_chain_and_stops_at_a_long_gap():
    rows = [
        make_row("c.jpg", 2200),
        make_row("a.jpg", 1000, lines=["設置状況"]),
        make_row("b.jpg", 1540),
    ]
    assert infer_activity_with_gap(rows) == [
        ("a.jpg", "設置状況"),
        ("b.jpg", "設置状況"),
        ("c.jpg", "unclassified"),
    ]


def test_unknown_timestamps_sort_last_and_never_carry():
    rows = [
        make_row("b.jpg", None),
        make_row("a.jpg", 0, lines=["設置状況"]),
        make_row("c.jpg", 60),
    ]
    assert infer_activity_with_gap(rows) == [
        ("a.jpg", "設置状況"),
        ("c.jpg", "設置状況"),
        ("b.jpg", "unclassified"),
    ]


def test_custom_fallback_label():
    assert infer_activity_with_gap([make_row("a.jpg", 0)], fallback="その他") == [("a.jpg", "その他")]
