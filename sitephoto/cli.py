# sitephoto/cli.py
"""
Command-line entry point.

Usage
-----
    sitephoto group    PHOTOS_DIR [--dry-run] [--profile] [--config sitephoto.json]
    sitephoto scene    PHOTOS_DIR [--apply] [--dry-run]
    sitephoto activity PHOTOS_DIR [--apply] [--dry-run] [--gap-minutes 10]
    sitephoto activity --csv rows.csv [--out activities.csv]
    sitephoto activity PHOTOS_DIR --materials [--out activities.csv]
    sitephoto tag      PHOTOS_DIR [--dry-run] [--profile]

`group` annotates new photos, groups them and prints the group summary.
`scene` / `activity` run the same pass and print counts per scene type or
activity folder; `--apply` moves the images into those folders.
`tag` sorts images into the category subdirectories that already exist under
PHOTOS_DIR, matching each photo's board text to a category name.
"""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from collections.abc import Sequence
from pathlib import Path

from sitephoto.core.activity import infer_activity_with_gap
from sitephoto.core.errors import SitePhotoError
from sitephoto.inputs.settings import AppSettings, SettingsLoader, with_overrides
from sitephoto.logs import configure_logging
from sitephoto.orchestrators import PhotoSorter, SortResult, TagResult
from sitephoto.tools.storage import read_activity_csv, write_activity_csv


def fmt_duration(seconds: float) -> str:
    """
    >>> fmt_duration(0.25)
    '250ms'
    >>> fmt_duration(3.04)
    '3.0s'
    """
    if seconds < 1.0:
        return f"{int(seconds * 1000)}ms"
    return f"{seconds:.1f}s"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sitephoto", description="Group and sort construction-site photos")
    p.add_argument("--config", type=str, default=None, help="Path to sitephoto.json (defaults to ./sitephoto.json if present).")
    p.add_argument("--provider", type=str, default=None, choices=["mock", "openai"], help="Annotation provider (overrides config).")
    p.add_argument("--log-level", type=str, default=None, help="Log level (overrides config).")
    sub = p.add_subparsers(dest="command", required=True)

    def _common(sp: argparse.ArgumentParser, *, path_required: bool = True) -> None:
        sp.add_argument("path", type=str, nargs=None if path_required else "?", default=None, help="Folder of photos.")
        sp.add_argument("--dry-run", action="store_true", help="Do not save records or move files.")
        sp.add_argument("--profile", action="store_true", help="Print per-phase timings.")

    g = sub.add_parser("group", help="Annotate and group photos by machine / station.")
    _common(g)
    g.add_argument("--gap-seconds", type=int, default=None, help="Segment gap in seconds (overrides config).")

    s = sub.add_parser("scene", help="Classify photos by scene type.")
    _common(s)
    s.add_argument("--apply", action="store_true", help="Move photos into scene folders.")
    s.add_argument("--include-electronic-board", action="store_true", help="Count electronic boards as boards.")

    a = sub.add_parser("activity", help="Name activity folders for photos.")
    _common(a, path_required=False)
    a.add_argument("--apply", action="store_true", help="Move photos into activity folders.")
    a.add_argument("--gap-minutes", type=int, default=None, help="Carry gap in minutes (overrides config).")
    a.add_argument("--materials", action="store_true", help="Extract material records (JSONL) and name activities from them.")
    a.add_argument("--csv", type=str, default=None, help="Name rows from a CSV instead of a photo folder.")
    a.add_argument("--out", type=str, default=None, help="Write (file, activity_name) CSV here (with --csv).")

    t = sub.add_parser("tag", help="Sort photos into existing category subdirectories by board text.")
    _common(t)
    return p


def _settings_from_args(args: argparse.Namespace) -> AppSettings:
    cfg = SettingsLoader().load(args.config)
    run: dict[str, object] = {}
    if args.provider:
        run["provider"] = args.provider
    if args.log_level:
        run["log_level"] = args.log_level
    cfg = with_overrides(cfg, "run", **run)
    if getattr(args, "gap_seconds", None) is not None:
        cfg = with_overrides(cfg, "grouping", segment_gap_s=args.gap_seconds)
    if getattr(args, "gap_minutes", None) is not None:
        cfg = with_overrides(cfg, "activity", gap_minutes=args.gap_minutes)
    if getattr(args, "include_electronic_board", False):
        cfg = with_overrides(cfg, "scene", include_electronic_board=True)
    return cfg


# ----------------------------
# Output
# ----------------------------


def print_group_summary(result: SortResult) -> None:
    summaries = result.summaries
    if not summaries:
        return
    print(f"\n--- Group Summary ({len(summaries)} groups, {len(result.records)} photos) ---")
    for s in summaries:
        print(f"  Group {s.group}: {s.machine_type} ({s.identity})")
        for fname, role in s.members:
            print(f"    - {fname}: {role}")


def print_counts(title: str, values: Sequence[str]) -> None:
    counts = Counter(values)
    print(f"\n--- {title} ({len(values)} photos) ---")
    for label in sorted(counts):
        print(f"  {label}: {counts[label]}")


def print_run_footer(result: SortResult, *, dry_run: bool, profile: bool) -> None:
    if result.skipped:
        print(f"Skipped {result.skipped} already annotated.")
    if result.failed:
        print(f"{result.failed} image(s) failed; they will be retried on the next run.")
    if dry_run:
        print("\n(dry-run: no files saved)")
    print_timings(result.timings, profile=profile)


def print_timings(timings: dict[str, float], *, profile: bool) -> None:
    if profile:
        print("\n--- Profile ---")
        for phase in ("collect", "annotate", "classify", "move", "total"):
            if phase in timings:
                print(f"  {phase + ':':<12} {fmt_duration(timings[phase]):>8}")
    elif "total" in timings:
        print(f"\nCompleted in {fmt_duration(timings['total'])}.")


# ----------------------------
# Commands
# ----------------------------


def _run_folder(args: argparse.Namespace, cfg: AppSettings, move_by: str | None) -> SortResult | None:
    folder = Path(args.path)
    if not folder.is_dir():
        raise SitePhotoError(f"Not a directory: {folder}")
    result = PhotoSorter(cfg).run(folder, dry_run=args.dry_run, move_by=move_by)
    if not result.records:
        print(f"No annotated images in {folder}")
        return None
    return result


def cmd_group(args: argparse.Namespace, cfg: AppSettings) -> int:
    result = _run_folder(args, cfg, None)
    if result is None:
        return 0
    print_group_summary(result)
    print_run_footer(result, dry_run=args.dry_run, profile=args.profile)
    return 0


def cmd_scene(args: argparse.Namespace, cfg: AppSettings) -> int:
    result = _run_folder(args, cfg, "scene" if args.apply else None)
    if result is None:
        return 0
    print_counts("Scene types", [a.scene_type.value if a.scene_type else "-" for a in result.records.values()])
    if args.apply:
        print(f"Moved {result.moved} file(s).")
    print_run_footer(result, dry_run=args.dry_run, profile=args.profile)
    return 0


def _emit_pairs(pairs: Sequence[tuple[str, str]], out: str | None) -> None:
    if out:
        write_activity_csv(Path(out), pairs)
        print(f"Wrote {len(pairs)} row(s) to {out}")
        return
    for file, name in pairs:
        print(f"{file}\t{name}")


def cmd_activity(args: argparse.Namespace, cfg: AppSettings) -> int:
    if args.csv:
        rows = read_activity_csv(Path(args.csv))
        pairs = infer_activity_with_gap(
            rows,
            gap_minutes=cfg.activity.gap_minutes,
            top_k=cfg.activity.top_k,
            fallback=cfg.activity.fallback_label,
        )
        _emit_pairs(pairs, args.out)
        return 0

    if not args.path:
        print("activity: a photo folder or --csv is required", file=sys.stderr)
        return 2

    if args.materials:
        folder = Path(args.path)
        if not folder.is_dir():
            raise SitePhotoError(f"Not a directory: {folder}")
        sorter = PhotoSorter(cfg)
        new = sorter.extract_materials(folder, dry_run=args.dry_run)
        failed = sum(1 for r in new if r.error)
        print(f"Extracted {len(new) - failed} material record(s), {failed} failed.")
        _emit_pairs(sorter.name_activities_from_materials(folder, pending=new), args.out)
        return 0

    result = _run_folder(args, cfg, "activity" if args.apply else None)
    if result is None:
        return 0
    print_counts("Activities", [a.activity_name or cfg.activity.fallback_label for a in result.records.values()])
    if args.apply:
        print(f"Moved {result.moved} file(s).")
    print_run_footer(result, dry_run=args.dry_run, profile=args.profile)
    return 0


def print_tag_summary(result: TagResult) -> None:
    print(f"\n--- Summary ({len(result.records)} classified) ---")
    for label, count in result.counts():
        print(f"  {label}: {count}")


def cmd_tag(args: argparse.Namespace, cfg: AppSettings) -> int:
    folder = Path(args.path)
    if not folder.is_dir():
        raise SitePhotoError(f"Not a directory: {folder}")
    result = PhotoSorter(cfg).tag(folder, dry_run=args.dry_run)
    print(f"Categories: {', '.join(result.categories)}")
    if not result.images:
        print(f"No images found in {folder}")
        return 0
    if result.skipped:
        print(f"Skipping {result.skipped} already classified.")
    print_tag_summary(result)
    if result.unmatched:
        print(f"{result.unmatched} unmatched - re-run to retry.")
    if args.dry_run:
        print("\n(dry-run: no files moved)")
    else:
        print(f"\n{result.moved} file(s) moved.")
    print_timings(result.timings, profile=args.profile)
    return 0


_COMMANDS = {"group": cmd_group, "scene": cmd_scene, "activity": cmd_activity, "tag": cmd_tag}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = _settings_from_args(args)
        configure_logging(cfg.run.log_level, cfg.run.log_file)
        return _COMMANDS[args.command](args, cfg)
    except SitePhotoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
