# sitephoto/orchestrators/photo_sorter.py
"""
Photo sorter orchestrator.

Flow for one folder:
  1) collect images (flat) and load photo-groups.json
  2) annotate the images without a record, in batches (thread pool)
  3) identity normalization → clustering → attachment propagation
  4) scene type and activity name per record
  5) save (unless dry-run) and summarize

Tag mode sorts the flat images of a folder into its existing category
subdirectories instead (`PhotoSorter.tag`).

The provider is the only I/O-heavy dependency; everything after step 2 is the
pure core operating on a snapshot.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from sitephoto.core.activity import infer_activity_with_gap
from sitephoto.core.errors import ProviderResponseError, SettingsError, SitePhotoError, provider_error_guard
from sitephoto.core.grouping import run_grouping_pipeline, summarize_groups
from sitephoto.core.media import read_captured_at
from sitephoto.core.scene import resolve_scene_type
from sitephoto.inputs.settings import AppSettings
from sitephoto.schemas.models import ActivityRow, GroupSummary, MaterialRecord, PhotoAnnotation, Snapshot, TagRecord
from sitephoto.tools.fs_ops import apply_moves, collect_images_flat, collect_subdirs, plan_moves
from sitephoto.tools.storage import (
    MATERIAL_FILE,
    append_jsonl,
    load_group_records,
    load_tag_records,
    read_material_records,
    save_group_records,
    save_tag_records,
)
from sitephoto.tools.vision import AnnotationProvider, get_provider, run_batch, to_photo_annotation

logger = logging.getLogger(__name__)

TimestampReader = Callable[[Path], "int | None"]


@dataclass
class SortResult:
    folder: Path
    records: Snapshot = field(default_factory=dict)
    images: int = 0
    skipped: int = 0
    annotated: int = 0
    failed: int = 0
    moved: int = 0
    saved: bool = False
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def summaries(self) -> list[GroupSummary]:
        return summarize_groups(self.records)


@dataclass
class TagResult:
    folder: Path
    categories: list[str] = field(default_factory=list)
    records: dict[str, TagRecord] = field(default_factory=dict)
    images: int = 0
    skipped: int = 0
    tagged: int = 0
    unmatched: int = 0
    moved: int = 0
    timings: dict[str, float] = field(default_factory=dict)

    def counts(self) -> list[tuple[str, int]]:
        """(category, count) in category order; empty categories are left out."""
        c = Counter(r.tag for r in self.records.values())
        return [(cat, c[cat]) for cat in self.categories if c[cat]]


def _chunks(items: Sequence[Path], size: int) -> list[list[Path]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class PhotoSorter:
    def __init__(
        self,
        settings: AppSettings | None = None,
        provider: AnnotationProvider | None = None,
        *,
        timestamp_reader: TimestampReader = read_captured_at,
    ) -> None:
        self.settings = settings or AppSettings()
        self.provider = provider if provider is not None else get_provider(self.settings.run.provider)
        self.timestamp_reader = timestamp_reader

    # ---------- Annotation ----------

    def _annotate_batch(self, batch_num: int, batch: list[Path]) -> dict[str, PhotoAnnotation]:
        logger.info("batch %d (%d images)", batch_num, len(batch))
        with provider_error_guard(str(batch[0].parent)):
            raws = run_batch(self.provider, [str(p) for p in batch])
        out: dict[str, PhotoAnnotation] = {}
        for path, raw in zip(batch, raws):
            if not raw:
                logger.warning("no annotation for %s; will retry on next run", path.name)
                continue
            out[path.name] = to_photo_annotation(raw, captured_at=self.timestamp_reader(path))
        return out

    def annotate_pending(self, pending: Sequence[Path]) -> tuple[Snapshot, int]:
        """Annotate images; returns (new records, number of images in failed batches)."""
        run = self.settings.run
        batches = _chunks(pending, run.batch_size)
        logger.info("%d image(s) in %d batch(es) (%d/batch, %d parallel)", len(pending), len(batches), run.batch_size, run.max_concurrent)

        added: Snapshot = {}
        failed = 0
        with ThreadPoolExecutor(max_workers=run.max_concurrent) as pool:
            futures = {pool.submit(self._annotate_batch, i, b): (i, b) for i, b in enumerate(batches, start=1)}
            for fut in as_completed(futures):
                batch_num, batch = futures[fut]
                try:
                    result = fut.result()
                except ProviderResponseError as e:
                    logger.error("batch %d failed: %s", batch_num, e)
                    failed += len(batch)
                    continue
                for fname, ann in result.items():
                    logger.debug("[B%d] %s -> %s / %s (%s)", batch_num, fname, ann.role, ann.machine_type, ann.identity)
                added.update(result)
        return added, failed

    # ---------- Reasoning ----------

    def classify(self, records: Mapping[str, PhotoAnnotation]) -> Snapshot:
        """Grouping pipeline, then scene type and activity name per record."""
        s = self.settings
        grouped = run_grouping_pipeline(records, gap_s=s.grouping.segment_gap_s)
        lexicon = s.resolved_measure_lexicon()

        rows = [ActivityRow.from_annotation(f, a) for f, a in grouped.items()]
        activities = dict(
            infer_activity_with_gap(
                rows,
                gap_minutes=s.activity.gap_minutes,
                top_k=s.activity.top_k,
                fallback=s.activity.fallback_label,
            )
        )

        out: Snapshot = {}
        for fname, ann in grouped.items():
            scene = resolve_scene_type(
                ann.objects,
                include_electronic_board=s.scene.include_electronic_board,
                board_threshold=s.scene.board_threshold,
                measure_threshold=s.scene.measure_threshold,
                measure_lexicon=lexicon,
            )
            out[fname] = ann.model_copy(update={"scene_type": scene, "activity_name": activities[fname]})
        return out

    # ---------- Material records ----------

    def extract_materials(self, folder: str | Path, *, dry_run: bool = False) -> list[MaterialRecord]:
        """
        Objects and raw text per image, appended to material-records.jsonl.

        Images with a record are skipped; failed images get a record with `error`
        set and are retried on the next run.
        """
        extract = getattr(self.provider, "extract_material", None)
        if not callable(extract):
            raise SettingsError(f"Provider {type(self.provider).__name__} cannot extract materials.")

        base = Path(folder)
        path = base / MATERIAL_FILE
        done = {r.file for r in read_material_records(path) if not r.error}
        pending = [p for p in collect_images_flat(base) if p.name not in done]
        logger.info("material extraction: %d pending, %d done", len(pending), len(done))

        def _one(p: Path) -> MaterialRecord:
            try:
                with provider_error_guard(p.name):
                    rec = extract(str(p))
            except ProviderResponseError as e:
                logger.error("material extraction failed for %s: %s", p.name, e)
                return MaterialRecord(file=p.name, error=str(e))
            if rec.file != p.name:
                logger.debug("provider named %s as %r; keeping the image name", p.name, rec.file)
                rec = rec.model_copy(update={"file": p.name})
            return rec

        with ThreadPoolExecutor(max_workers=self.settings.run.max_concurrent) as pool:
            new = list(pool.map(_one, pending))
        if not dry_run:
            for rec in new:
                append_jsonl(path, rec)
        return new

    def name_activities_from_materials(
        self, folder: str | Path, *, pending: Sequence[MaterialRecord] = ()
    ) -> list[tuple[str, str]]:
        """
        Activity names for the material records of a folder, timed by EXIF.
        `pending` records (e.g. from a dry-run extraction) override stored ones.
        """
        base = Path(folder)
        a = self.settings.activity
        by_file = {r.file: r for r in read_material_records(base / MATERIAL_FILE)}
        by_file.update({r.file: r for r in pending})
        rows = [r.to_activity_row(self.timestamp_reader(base / r.file)) for r in by_file.values() if not r.error]
        return infer_activity_with_gap(rows, gap_minutes=a.gap_minutes, top_k=a.top_k, fallback=a.fallback_label)

    # ---------- Category tagging ----------

    def _tag_batch(self, batch_num: int, batch: list[Path], categories: Sequence[str]) -> dict[str, TagRecord]:
        logger.info("tag batch %d (%d images)", batch_num, len(batch))
        with provider_error_guard(str(batch[0].parent)):
            items = self.provider.tag_batch([str(p) for p in batch], categories)  # type: ignore[attr-defined]
        if len(items) != len(batch):
            raise ProviderResponseError(f"tag batch returned {len(items)} items for {len(batch)} images")

        allowed = set(categories)
        out: dict[str, TagRecord] = {}
        for path, item in zip(batch, items):
            if not item:
                continue
            try:
                rec = TagRecord.model_validate(item)
            except ValueError as e:
                logger.warning("invalid tag for %s: %s", path.name, e)
                continue
            if rec.tag not in allowed:
                logger.warning("%s tagged %r, which is not a category", path.name, rec.tag)
                continue
            logger.info("[B%d] %s -> %s (%.0f%%)", batch_num, path.name, rec.tag, rec.confidence * 100)
            out[path.name] = rec
        return out

    def tag(self, folder: str | Path, *, dry_run: bool = False) -> TagResult:
        """
        Sort the flat images of a folder into its category subdirectories.

        Categories are the names of the existing subdirectories. Tagged images are moved
        into their category (unless dry_run) and recorded in photo-tags.json, so later
        runs skip them. Untagged images, or tags outside the category list, stay where
        they are and are retried on the next run.
        """
        if not callable(getattr(self.provider, "tag_batch", None)):
            raise SettingsError(f"Provider {type(self.provider).__name__} cannot tag images.")

        base = Path(folder)
        result = TagResult(folder=base)
        total_start = time.perf_counter()

        result.categories = collect_subdirs(base)
        if not result.categories:
            raise SitePhotoError(f"No subdirectories found in {base}. Create category directories first.")

        t = time.perf_counter()
        images = collect_images_flat(base)
        records = load_tag_records(base)
        result.timings["collect"] = time.perf_counter() - t
        result.images = len(images)
        result.records = records
        if not images:
            logger.info("no images found in %s", base)
            return result

        pending = [p for p in images if p.name not in records]
        result.skipped = len(images) - len(pending)

        t = time.perf_counter()
        run = self.settings.run
        added: dict[str, TagRecord] = {}
        with ThreadPoolExecutor(max_workers=run.max_concurrent) as pool:
            futures = {
                pool.submit(self._tag_batch, i, b, result.categories): i
                for i, b in enumerate(_chunks(pending, run.batch_size), start=1)
            }
            for fut in as_completed(futures):
                try:
                    added.update(fut.result())
                except ProviderResponseError as e:
                    logger.error("tag batch %d failed: %s", futures[fut], e)
        result.tagged = len(added)
        result.unmatched = len(pending) - len(added)
        result.records = {**records, **added}
        result.timings["classify"] = time.perf_counter() - t

        if not dry_run:
            t = time.perf_counter()
            result.moved = apply_moves(plan_moves(base, {f: r.tag for f, r in added.items()}))
            result.timings["move"] = time.perf_counter() - t
            if added:
                save_tag_records(base, result.records)

        result.timings["total"] = time.perf_counter() - total_start
        return result

    # ---------- Run ----------

    def run(self, folder: str | Path, *, dry_run: bool = False, move_by: str | None = None) -> SortResult:
        """
        Annotate, classify and persist one folder.

        move_by: None, "activity" or "scene". When set, images are moved into
        subfolders named by that attribute (dry_run only logs the plan).
        """
        base = Path(folder)
        result = SortResult(folder=base)
        total_start = time.perf_counter()

        t = time.perf_counter()
        images = collect_images_flat(base)
        records = load_group_records(base)
        result.timings["collect"] = time.perf_counter() - t
        result.images = len(images)
        if not images and not records:
            logger.info("no images found in %s", base)
            return result

        pending = [p for p in images if p.name not in records]
        result.skipped = len(images) - len(pending)
        if result.skipped:
            logger.info("skipping %d already annotated", result.skipped)

        t = time.perf_counter()
        if pending:
            added, result.failed = self.annotate_pending(pending)
            result.annotated = len(added)
            records = {**records, **added}
        result.timings["annotate"] = time.perf_counter() - t

        t = time.perf_counter()
        result.records = self.classify(records)
        result.timings["classify"] = time.perf_counter() - t

        if not dry_run:
            save_group_records(base, result.records)
            result.saved = True

        if move_by is not None:
            result.moved = self._move(base, result.records, move_by, dry_run=dry_run)

        result.timings["total"] = time.perf_counter() - total_start
        return result

    def _move(self, base: Path, records: Mapping[str, PhotoAnnotation], move_by: str, *, dry_run: bool) -> int:
        if move_by == "activity":
            dest = {f: a.activity_name or self.settings.activity.fallback_label for f, a in records.items()}
        elif move_by == "scene":
            dest = {f: a.scene_type.value if a.scene_type else "overview" for f, a in records.items()}
        else:
            raise ValueError(f"Unknown move target: {move_by!r}")
        return apply_moves(plan_moves(base, dest), dry_run=dry_run)


__all__ = ["PhotoSorter", "SortResult", "TagResult"]
