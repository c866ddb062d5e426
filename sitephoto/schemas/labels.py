# sitephoto/schemas/labels.py
from __future__ import annotations

from enum import Enum

# =========================
# Canonical label enums
# =========================


class SceneType(str, Enum):
    overview = "overview"
    board_with_measure = "board_with_measure"
    measure_closeup = "measure_closeup"


class MachineRole(str, Enum):
    """Roles of the 3-photos-per-machine convention (plus the plate variant)."""

    overview = "機械全景"
    inspection_tag = "特定自主検査証票"
    emission_tag = "排ガス対策型・低騒音型機械証票"
    number_plate = "ナンバープレート"


# =========================
# Identity / station vocabulary
# =========================

# Side-road ("attachment road") marker. Fixed domain term, not configurable.
ATTACHMENT_ROAD_KEYWORD = "付替道路"
ATTACHMENT_PREFIX = ATTACHMENT_ROAD_KEYWORD

# Order matters only for readability; the earliest occurrence in the text wins.
STATION_MARKERS: tuple[str, ...] = ("No.", "No ", "NO.", "NO ")

STATION_PREFIX = "No."

# =========================
# Activity naming vocabulary
# =========================

# Board fields that describe the photo, not the activity.
METADATA_FIELD_KEYS: frozenset[str] = frozenset(
    {
        "工事名",
        "工事件名",
        "工種",
        "種別",
        "細別",
        "測点",
        "位置",
        "日付",
        "撮影日",
        "撮影日時",
        "撮影者",
        "施工者",
        "受注者",
        "発注者",
        "請負者",
        "備考",
    }
)

# Keys ending with these name a person or a role ("立会者", "現場担当").
PERSON_ROLE_SUFFIXES: tuple[str, ...] = ("者", "担当", "立会", "代理人", "責任者")

# Generic metadata terms that never name an activity.
ACTIVITY_STOPWORDS: frozenset[str] = frozenset(
    {
        "工事名",
        "工事件名",
        "工事",
        "工種",
        "種別",
        "細別",
        "測点",
        "位置",
        "日付",
        "撮影日",
        "撮影者",
        "施工者",
        "受注者",
        "発注者",
        "備考",
        "黒板",
        "写真",
        "現場",
        "令和",
        "平成",
    }
)

# Curated allowlist of activity terms. Compound tokens credit every term they contain.
ACTIVITY_ALLOWLIST: tuple[str, ...] = (
    # traffic safety / preparation
    "交通保安施設",
    "交通誘導",
    "保安施設",
    "安全施設",
    "仮設",
    "着手前",
    "完成",
    "竣工",
    # earthwork
    "掘削",
    "床掘",
    "埋戻し",
    "盛土",
    "切土",
    "残土処理",
    # pavement
    "路盤",
    "下層路盤",
    "上層路盤",
    "表層",
    "基層",
    "舗装",
    "乳剤散布",
    "敷均し",
    "転圧",
    "不陸整正",
    "舗装切断",
    "取壊し",
    "区画線",
    # structures / drainage
    "側溝",
    "集水桝",
    "縁石",
    "据付",
    "型枠",
    "配筋",
    "打設",
    "養生",
    # control records
    "出来形",
    "品質管理",
    "温度測定",
    "材料検収",
    "搬入",
    "清掃",
    "片付",
    "安全教育",
    "安全訓練",
    # compound status/inspection/confirmation terms
    "設置状況",
    "施工状況",
    "作業状況",
    "完了状況",
    "設置状態",
    "段階確認",
    "出来形確認",
    "材料確認",
    "立会検査",
    "出来形検査",
    "安全点検",
    "作業指示",
)

# Relevance bonuses: status > inspection/instruction > confirmation.
STATUS_SUFFIXES: tuple[str, ...] = ("状況", "状態")
INSPECTION_SUFFIXES: tuple[str, ...] = ("検査", "点検", "指示")
CONFIRMATION_SUFFIXES: tuple[str, ...] = ("確認",)

UNCLASSIFIED_ACTIVITY = "unclassified"

# =========================
# Scene vocabulary
# =========================

BOARD_TERMS: tuple[str, ...] = (
    "黒板",
    "工事黒板",
    "ホワイトボード",
    "小黒板",
    "board",
    "blackboard",
    "whiteboard",
    "signboard",
)

ELECTRONIC_BOARD_TERMS: tuple[str, ...] = (
    "電子黒板",
    "電子小黒板",
    "electronic board",
    "electronic blackboard",
    "e-board",
    "eboard",
    "digital board",
)

DEFAULT_MEASURE_LABELS: tuple[str, ...] = (
    "スケール",
    "メジャー",
    "巻尺",
    "コンベックス",
    "リボンテープ",
    "箱尺",
    "標尺",
    "ピンポール",
    "検測",
    "温度計",
    "tape measure",
    "measuring tape",
    "ruler",
    "scale",
    "leveling staff",
    "level rod",
    "thermometer",
)
