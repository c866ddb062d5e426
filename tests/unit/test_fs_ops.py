# tests/unit/test_fs_ops.py
from __future__ import annotations

from pathlib import Path

from sitephoto.tools.fs_ops import apply_moves, collect_images_flat, collect_subdirs, plan_moves, sanitize_folder_name


def _touch(p: Path) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(b"\x00")
    return p


def test_collect_images_flat_is_sorted_and_non_recursive(tmp_path: Path):
    for name in ("b.JPG", "a.jpeg", "c.png", "d.heic", "e.gif", "notes.txt"):
        _touch(tmp_path / name)
    _touch(tmp_path / "sub" / "z.jpg")
    assert [p.name for p in collect_images_flat(tmp_path)] == ["a.jpeg", "b.JPG", "c.png", "d.heic"]


def test_collect_images_on_missing_folder(tmp_path: Path):
    assert collect_images_flat(tmp_path / "nope") == []


def test_sanitize_folder_name():
    assert sanitize_folder_name("付替道路 No.3") == "付替道路 No.3"
    assert sanitize_folder_name('a/b:c*?"<>|d') == "a_b_c_d"
    assert sanitize_folder_name("  ..  ") == "unclassified"
    assert sanitize_folder_name("", fallback="misc") == "misc"


def test_plan_and_apply_moves(tmp_path: Path):
    _touch(tmp_path / "a.jpg")
    _touch(tmp_path / "b.jpg")
    plan = plan_moves(tmp_path, {"a.jpg": "設置状況", "b.jpg": "掘削/埋戻し", "gone.jpg": "x"})
    assert [(m.src.name, m.dst.parent.name) for m in plan] == [("a.jpg", "設置状況"), ("b.jpg", "掘削_埋戻し")]

    assert apply_moves(plan, dry_run=True) == 0
    assert (tmp_path / "a.jpg").exists()

    assert apply_moves(plan) == 2
    assert (tmp_path / "設置状況" / "a.jpg").exists()
    assert not (tmp_path / "a.jpg").exists()


def test_apply_moves_never_overwrites(tmp_path: Path):
    _touch(tmp_path / "a.jpg")
    existing = _touch(tmp_path / "x" / "a.jpg")
    existing.write_bytes(b"keep")
    assert apply_moves(plan_moves(tmp_path, {"a.jpg": "x"})) == 0
    assert existing.read_bytes() == b"keep"
    assert (tmp_path / "a.jpg").exists()


def test_collect_subdirs_lists_visible_directories(tmp_path: Path):
    for name in ("転圧", "掘削", ".cache"):
        (tmp_path / name).mkdir()
    _touch(tmp_path / "a.jpg")
    assert collect_subdirs(tmp_path) == ["掘削", "転圧"]
    assert collect_subdirs(tmp_path / "a.jpg") == []
    assert collect_subdirs(tmp_path / "nope") == []
