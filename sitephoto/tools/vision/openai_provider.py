# sitephoto/tools/vision/openai_provider.py
"""
OpenAI Annotation Provider

Purpose
-------
Production `AnnotationProvider` using OpenAI multimodal models. `annotate_batch`
packs a whole batch into one request (the model sees every filename and image),
so the three photos of one machine can be given the same identity.

Environment
-----------
OPENAI_API_KEY               : required
SITEPHOTO_VISION_MODEL       : default "gpt-4o-mini"
SITEPHOTO_VISION_TIMEOUT_S   : default "60"
SITEPHOTO_VISION_MAX_RETRIES : default "2"
"""

from __future__ import annotations

import base64
import logging
import os
import time
from collections.abc import Sequence
from pathlib import Path

from sitephoto.core.errors import ProviderResponseError, SettingsError
from sitephoto.schemas.models import MaterialRecord

from .provider_base import AnnotationProvider, RawAnnotation
from .response import parse_annotation_json, parse_material_json, parse_tag_json

logger = logging.getLogger(__name__)

_MIME = {".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png", ".heic": "image/heic"}


class OpenAIAnnotationProvider(AnnotationProvider):
    def __init__(self) -> None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise SettingsError("OPENAI_API_KEY not set for OpenAIAnnotationProvider.")
        try:
            from openai import OpenAI
        except ImportError as e:
            raise SettingsError("OpenAI SDK not available. Install `sitephoto[vision]`.") from e

        self._client = OpenAI(api_key=api_key)
        self._model = os.getenv("SITEPHOTO_VISION_MODEL", "gpt-4o-mini")
        self._timeout_s = float(os.getenv("SITEPHOTO_VISION_TIMEOUT_S", "60"))
        self._max_retries = int(os.getenv("SITEPHOTO_VISION_MAX_RETRIES", "2"))

    # ---------- single ----------
    def annotate(self, path: str) -> RawAnnotation:
        return self.annotate_batch([path])[0]

    # ---------- batch ----------
    def annotate_batch(self, paths: list[str]) -> list[RawAnnotation]:
        """
        One request per batch. The result aligns with `paths`; an image the model
        did not return comes back as an empty record (no "file" key).
        """
        files = [Path(p) for p in paths]
        for p in files:
            if not p.is_file():
                raise FileNotFoundError(f"Image not found: {p}")
        raw = self._with_retries(group_prompt([p.name for p in files]), files)
        by_name = {rec["file"]: rec for rec in parse_annotation_json(raw)}
        missing = [p.name for p in files if p.name not in by_name]
        if missing:
            logger.warning("provider returned no record for %d image(s): %s", len(missing), ", ".join(missing))
        return [by_name.get(p.name, {}) for p in files]

    def extract_material(self, path: str) -> MaterialRecord:
        """Objects and raw text only, no classification."""
        p = Path(path)
        raw = self._with_retries(material_prompt(p.name), [p])
        return parse_material_json(raw).model_copy(update={"file": p.name})

    def tag_batch(self, paths: Sequence[str], categories: Sequence[str]) -> list[dict[str, object]]:
        """
        Board text matched to one of `categories`, one request per batch. Aligned with
        `paths`; an image the model skipped comes back as {}.
        """
        files = [Path(p) for p in paths]
        for p in files:
            if not p.is_file():
                raise FileNotFoundError(f"Image not found: {p}")
        raw = self._with_retries(tag_prompt([p.name for p in files], categories), files)
        by_name = {item["file"]: item for item in parse_tag_json(raw)}
        return [by_name.get(p.name, {}) for p in files]

    # ---------- OpenAI calls ----------
    def _with_retries(self, prompt: str, images: Sequence[Path]) -> str:
        last_err: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                return self._call_responses_api(prompt, images)
            except Exception as e:  # noqa: BLE001
                last_err = e
                logger.warning("vision call failed (attempt %d/%d): %s", attempt + 1, self._max_retries + 1, e)
                if attempt < self._max_retries:
                    time.sleep(min(0.5 * (attempt + 1), 2.0))
        assert last_err is not None
        raise ProviderResponseError(f"AI analyze failed: {last_err}") from last_err

    def _call_responses_api(self, prompt: str, images: Sequence[Path]) -> str:
        content: list[dict[str, str]] = [{"type": "input_text", "text": prompt}]
        for p in images:
            content.append({"type": "input_text", "text": f"file: {p.name}"})
            content.append({"type": "input_image", "image_url": _data_url(p)})
        out = self._client.responses.create(
            model=self._model,
            input=[{"role": "user", "content": content}],
            timeout=self._timeout_s,
        )
        txt = getattr(out, "output_text", None)
        if isinstance(txt, str) and txt.strip():
            return txt
        raise ProviderResponseError("Empty response from vision model.")


# ---------- prompts ----------
def group_prompt(filenames: Sequence[str]) -> str:
    names = ", ".join(filenames)
    return f"""工事現場写真を解析せよ。使用機械は3枚1組: 機械全景/特定自主検査証票(またはナンバープレート)/排ガス対策型・低騒音型機械証票。
Output ONLY JSON array: [{{"file":"filename","role":"?","machine_type":"?","identity":"?","has_board":false,"detected_text":"","description":"","objects":[{{"label":"?","bbox":{{"x":0,"y":0,"w":0,"h":0}},"area_ratio":0}}],"board_fields":{{}},"board_lines":[]}}, ...]
ファイル: {names}
role: "機械全景" or "特定自主検査証票" or "排ガス対策型・低騒音型機械証票" or "ナンバープレート" (機械写真以外は空文字)
machine_type: 機械の種類(例: タイヤローラー, アスファルトフィニッシャー, バックホウ)
identity: 型式番号(例: TZ-703, HA60C-2)または測点(例: No.12)。同一機械の3枚は同じidentityにせよ。
detected_text: 黒板・銘板・標識の文字をそのまま。board_lines: 黒板の文字を1行ずつ。board_fields: 黒板の項目名と値。
objects: 写っている物体。bbox と area_ratio は画像サイズに対する割合(0~1)。"""


def tag_prompt(filenames: Sequence[str], categories: Sequence[str]) -> str:
    names = ", ".join(filenames)
    cats = " ".join(f'"{c}"' for c in categories)
    return f"""以下の工事現場写真の黒板に書かれたテキストを読み取り、最も近いカテゴリに分類せよ。Output ONLY JSON array: [{{"file":"filename","tag":"?","confidence":0}}, ...]
ファイル: {names}
カテゴリ候補(必ずこの中から選べ):
{cats}
黒板のテキストとカテゴリ名を照合し、最も一致するものを選べ。
confidence: 0.0~1.0"""


def material_prompt(file: str) -> str:
    return f"""次の画像について、写っている物体と文字情報だけを抽出せよ。推測や分類は不要。Output ONLY JSON object: {{"file":"{file}","objects":["..."],"board_text":"","other_text":"","notes":""}}
対象ファイル: {file}
objects: 写っている物体の短いリスト（例: ローラー, アスファルト, 作業員, 看板）
board_text: 黒板があればその文字をそのまま
other_text: 黒板以外の文字（標識、銘板、番号など）
notes: 事実ベースの補足（任意）"""


# ---------- helpers ----------
def _data_url(p: Path) -> str:
    mime = _MIME.get(p.suffix.lower(), "image/jpeg")
    return f"data:{mime};base64,{base64.b64encode(p.read_bytes()).decode('ascii')}"
