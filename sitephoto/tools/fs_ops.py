# sitephoto/tools/fs_ops.py
from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".heic"}

# Characters rejected by Windows/macOS file systems, plus control chars
_UNSAFE_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def is_image(p: Path) -> bool:
    return p.suffix.lower() in IMAGE_EXTS


def collect_images_flat(folder: Path) -> list[Path]:
    """Image files directly under folder (not recursive), sorted by name."""
    if not folder.exists() or not folder.is_dir():
        return []
    return [p for p in sorted(folder.iterdir(), key=lambda x: x.name) if p.is_file() and is_image(p)]


def collect_subdirs(folder: Path) -> list[str]:
    """Names of the visible subdirectories of folder, sorted; these are the tag categories."""
    if not folder.is_dir():
        return []
    return sorted(p.name for p in folder.iterdir() if p.is_dir() and not p.name.startswith("."))


def sanitize_folder_name(name: str, *, fallback: str = "unclassified") -> str:
    s = _UNSAFE_RE.sub("_", name).strip().strip(".")
    return s or fallback


@dataclass(frozen=True, slots=True)
class PlannedMove:
    src: Path
    dst: Path


def plan_moves(base: Path, destinations: Mapping[str, str]) -> list[PlannedMove]:
    """filename → folder name; files already in place or missing are skipped."""
    plan: list[PlannedMove] = []
    for fname in sorted(destinations):
        src = base / fname
        if not src.is_file():
            logger.warning("skip move, file not found: %s", src)
            continue
        dst = base / sanitize_folder_name(destinations[fname]) / fname
        if dst != src:
            plan.append(PlannedMove(src, dst))
    return plan


def apply_moves(plan: Iterable[PlannedMove], *, dry_run: bool = False) -> int:
    """Execute planned moves; an existing destination is never overwritten. Returns moves done."""
    moved = 0
    for mv in plan:
        if dry_run:
            logger.info("[dry-run] %s -> %s", mv.src.name, mv.dst.parent.name)
            continue
        if mv.dst.exists():
            logger.warning("skip move, destination exists: %s", mv.dst)
            continue
        mv.dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(mv.src), str(mv.dst))
        moved += 1
    return moved
