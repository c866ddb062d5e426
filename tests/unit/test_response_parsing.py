# tests/unit/test_response_parsing.py
from __future__ import annotations

import json

import pytest

from sitephoto.core.errors import ProviderResponseError
from sitephoto.tools.vision import (
    extract_json_array,
    extract_json_object,
    parse_annotation_json,
    parse_material_json,
    parse_tag_json,
)
from sitephoto.tools.vision.response import strip_code_fences


def test_fences_and_prose_are_tolerated():
    body = json.dumps([{"file": "a.jpg", "machine_id": "TZ703", "role": "機械全景"}], ensure_ascii=False)
    for text in (body, f"```json\n{body}\n```", f"Here you go:\n{body}\nThanks"):
        (rec,) = parse_annotation_json(text)
        assert rec["file"] == "a.jpg"
        assert rec["identity"] == "TZ703"
        assert rec["role"] == "機械全景"


def test_single_object_and_items_without_file():
    out = parse_annotation_json('{"file": "b.jpg", "identity": "X"}')
    assert [r["file"] for r in out] == ["b.jpg"]
    out = parse_annotation_json('[{"identity": "X"}, "junk", {"file": "  "}, {"file": "c.jpg"}]')
    assert [r["file"] for r in out] == ["c.jpg"]


def test_objects_are_clamped_and_strings_accepted():
    text = json.dumps(
        [
            {
                "file": "a.jpg",
                "objects": [
                    {"label": "board", "area_ratio": 1.7, "bbox": {"x": -0.1, "y": 0.2, "w": 0.5, "h": 2}},
                    {"label": "ruler", "area_ratio": "n/a"},
                    "tape measure",
                    {"area_ratio": 0.2},
                ],
                "board_fields": {"作業": "転圧", "温度": None},
                "board_lines": ["設置状況", 3],
            }
        ]
    )
    (rec,) = parse_annotation_json(text)
    objs = rec["objects"]
    assert objs[0]["area_ratio"] == 1.0
    assert objs[0]["bbox"] == {"x": 0.0, "y": 0.2, "w": 0.5, "h": 1.0}
    assert objs[1]["area_ratio"] == 0.0
    assert objs[2] == {"label": "tape measure"}
    assert len(objs) == 3
    assert rec["board_fields"] == {"作業": "転圧", "温度": ""}
    assert rec["board_lines"] == ["設置状況"]


def test_unparseable_output_raises():
    with pytest.raises(ProviderResponseError):
        parse_annotation_json("sorry, I cannot help with that")


def test_json_extraction_helpers():
    assert extract_json_array("x [1, 2] y") == "[1, 2]"
    assert extract_json_array("no array") is None
    assert extract_json_object('x {"a": 1} y') == '{"a": 1}'
    assert extract_json_object("} {") is None
    assert strip_code_fences("```\n[]\n```") == "[]"


def test_material_record_normalizes_missing_fields():
    rec = parse_material_json('```json\n{"file": "a.jpg", "objects": null, "board_text": "転圧"}\n```')
    assert rec.file == "a.jpg"
    assert rec.objects == []
    assert rec.board_text == "転圧"
    assert rec.other_text == "" and rec.notes == ""
    assert rec.error is None


@pytest.mark.parametrize("text", ["no object here", '{"file": "a.jpg",}', '{"objects": 5}'])
def test_material_errors(text):
    with pytest.raises(ProviderResponseError):
        parse_material_json(text)


def test_tag_items_keep_file_tag_and_confidence():
    text = '```json\n[{"file": "a.jpg", "tag": " 掘削 ", "confidence": 0.7}, {"file": "b.jpg", "tag": ""}, {"tag": "転圧"}, {"file": "c.jpg", "tag": "転圧"}]\n```'
    assert parse_tag_json(text) == [
        {"file": "a.jpg", "tag": "掘削", "confidence": 0.7},
        {"file": "c.jpg", "tag": "転圧", "confidence": 0.0},
    ]
    with pytest.raises(ProviderResponseError):
        parse_tag_json("no json at all")
