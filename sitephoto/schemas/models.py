# sitephoto/schemas/models.py

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .labels import SceneType

# =========================
# Vision-model outputs
# =========================


class BBox(BaseModel):
    """Normalized bounding box; all values are fractions of the image size."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(0.0, ge=0, le=1, description="Left edge as a fraction of image width.")
    y: float = Field(0.0, ge=0, le=1, description="Top edge as a fraction of image height.")
    w: float = Field(0.0, ge=0, le=1, description="Width as a fraction of image width.")
    h: float = Field(0.0, ge=0, le=1, description="Height as a fraction of image height.")


class DetectedObject(BaseModel):
    """One object reported by the vision model. Consumed read-only by the scene classifier."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Free-form object label as emitted by the provider (any language).")
    bbox: BBox = Field(default_factory=BBox, description="Normalized bounding box.")
    area_ratio: float = Field(0.0, ge=0, le=1, description="Object area divided by image area.")


class PhotoAnnotation(BaseModel):
    """
    Per-photo annotation, keyed by filename in a `dict[str, PhotoAnnotation]`.

    The grouping pipeline only ever rewrites `identity` and `group`, and does so by
    building new instances (`model_copy(update=...)`) over the whole collection.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    identity: str = Field(
        "",
        validation_alias=AliasChoices("identity", "machine_id"),
        description="Candidate identity: machine serial, plate number or station marker.",
    )
    captured_at: int | None = Field(None, description="Unix timestamp; None means unknown and sorts last.")
    detected_text: str = Field("", description="Text read from boards, plates and signs.")
    description: str = Field("", description="Free-text description from the provider.")
    has_board: bool = Field(False, description="Whether a site board is visible.")
    group: int = Field(0, ge=0, description="Dense 1..N group number; 0 until assigned.")

    # Machine-photo convention (three photos per machine)
    role: str = Field("", description='Photo role, e.g. "機械全景" or "特定自主検査証票".')
    machine_type: str = Field("", description="Machine kind, e.g. タイヤローラー.")

    # Inputs for the independent enrichments
    objects: list[DetectedObject] = Field(default_factory=list, description="Detected objects with area ratios.")
    board_fields: dict[str, str] = Field(default_factory=dict, description="Board transcription as key → value.")
    board_lines: list[str] = Field(default_factory=list, description="Board transcription, one entry per line.")

    # Enrichment outputs
    scene_type: SceneType | None = Field(None, description="Inferred scene type.")
    activity_name: str | None = Field(None, description="Activity folder name (activity mode only).")

    @field_validator("identity", "detected_text", "description", "role", "machine_type", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> object:
        return "" if v is None else v


# Snapshot passed between pipeline passes: filename → annotation
Snapshot = dict[str, PhotoAnnotation]


# =========================
# Activity naming
# =========================


class ActivityFrame(BaseModel):
    """Previous photo's resolved activity during one left-to-right temporal scan."""

    model_config = ConfigDict(frozen=True)

    activity: str
    ts: int


class ActivityRow(BaseModel):
    """Per-photo text consumed by the activity namer."""

    model_config = ConfigDict(frozen=True)

    file: str = Field(..., min_length=1, description="Image filename.")
    ts: int | None = Field(None, description="Unix timestamp of capture, if known.")
    board_fields: dict[str, str] = Field(default_factory=dict, description="Structured board fields.")
    board_lines: list[str] = Field(default_factory=list, description="Board transcription per line.")
    board_text: str = Field("", description="Board text as one string.")
    other_text: str = Field("", description="Text outside the board (signs, plates).")
    notes: str = Field("", description="Free-form notes.")

    @classmethod
    def from_annotation(cls, file: str, ann: PhotoAnnotation) -> ActivityRow:
        return cls(
            file=file,
            ts=ann.captured_at,
            board_fields=dict(ann.board_fields),
            board_lines=list(ann.board_lines),
            board_text=ann.detected_text,
            notes=ann.description,
        )


class MaterialRecord(BaseModel):
    """Objects and raw text extracted from one image, without any classification."""

    file: str = ""
    objects: list[str] = Field(default_factory=list)
    board_text: str = ""
    other_text: str = ""
    notes: str = ""
    error: str | None = None

    @field_validator("file", "board_text", "other_text", "notes", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("objects", mode="before")
    @classmethod
    def _none_to_list(cls, v: object) -> object:
        return [] if v is None else v

    def to_activity_row(self, ts: int | None = None) -> ActivityRow:
        return ActivityRow(
            file=self.file,
            ts=ts,
            board_text=self.board_text,
            other_text=self.other_text,
            notes=self.notes,
        )


class TagRecord(BaseModel):
    """Category chosen for one image from the folder's category subdirectories."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tag: str = Field(..., min_length=1, description="Category (subdirectory) name.")
    confidence: float = Field(0.0, ge=0.0, le=1.0, description="Model confidence, 0.0 to 1.0.")

    @field_validator("tag", mode="before")
    @classmethod
    def _strip_tag(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: object) -> object:
        if v is None:
            return 0.0
        try:
            return min(max(float(v), 0.0), 1.0)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return v


# =========================
# Summaries
# =========================


class GroupSummary(BaseModel):
    """One group as shown in the CLI summary."""

    group: int
    identity: str
    machine_type: str = ""
    members: list[tuple[str, str]] = Field(default_factory=list, description="(filename, role) pairs sorted by filename.")
