from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from statistics import median
from typing import Iterable

import numpy as np

from inspection.ocr.image_utils import OCRToken, to_int_bbox

logger = logging.getLogger(__name__)

_PADDLE_INSTANCE = None

DEFAULT_ENGINE_ORDER = ("paddle", "tesseract")


class OCRUnavailableError(RuntimeError):
    pass


@dataclass
class OCRResult:
    engine: str
    tokens: list[OCRToken] = field(default_factory=list)

    @property
    def text(self) -> str:
        return tokens_to_text(self.tokens)


def get_paddle_device() -> str:
    device = os.getenv("OCR_DEVICE")
    if device:
        return device

    use_gpu_env = os.getenv("OCR_USE_GPU")
    if use_gpu_env is not None:
        return "gpu" if use_gpu_env.lower() in {"1", "true", "yes", "y"} else "cpu"
    return "cpu"


def group_tokens_by_row(tokens: Iterable[OCRToken]) -> list[list[OCRToken]]:
    tokens_list = list(tokens)
    if not tokens_list:
        return []
    row_height = median(t.height for t in tokens_list)
    threshold = max(6, row_height * 0.6)

    rows: list[list[OCRToken]] = []
    for token in sorted(tokens_list, key=lambda t: (t.bbox[1], t.bbox[0])):
        for row in rows:
            row_cy = sum(t.center_y for t in row) / len(row)
            if abs(token.center_y - row_cy) <= threshold:
                row.append(token)
                break
        else:
            rows.append([token])
    return rows


def tokens_to_text(tokens: Iterable[OCRToken]) -> str:
    """Join tokens into reading-order text: one line per visual row, left to right."""
    lines = []
    for row in group_tokens_by_row(tokens):
        words = [t.text.strip() for t in sorted(row, key=lambda t: t.bbox[0]) if t.text and t.text.strip()]
        if words:
            lines.append(" ".join(words))
    return "\n".join(lines)


def run_ocr(
    image: np.ndarray,
    lang: str = "japan",
    engine_preference: Iterable[str] | None = None,
) -> OCRResult:
    """Run OCR using the first engine that yields tokens.

    Priority:
    - PaddleOCR (if installed)
    - Tesseract (if pytesseract + binary available)

    Raises OCRUnavailableError when no engine could run at all.
    """
    order = tuple(engine_preference or DEFAULT_ENGINE_ORDER)
    last_result: OCRResult | None = None
    for engine in order:
        try:
            if engine == "paddle":
                result = _run_paddle(image, lang=lang)
            elif engine == "tesseract":
                result = _run_tesseract(image, lang=lang)
            else:
                logger.warning("Unknown OCR engine %r skipped", engine)
                continue
        except OCRUnavailableError as exc:
            logger.info("OCR engine %s unavailable: %s", engine, exc)
            continue
        if result.tokens:
            return result
        if last_result is None:
            last_result = result

    if last_result is None:
        raise OCRUnavailableError(f"No OCR engine available (tried {', '.join(order)})")
    return last_result


def _run_paddle(image: np.ndarray, lang: str) -> OCRResult:
    global _PADDLE_INSTANCE
    try:
        from paddleocr import PaddleOCR
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise OCRUnavailableError("PaddleOCR not installed") from exc

    if _PADDLE_INSTANCE is None:
        _PADDLE_INSTANCE = PaddleOCR(
            use_angle_cls=True,
            lang="japan" if lang == "japan" else "en",
            use_gpu=get_paddle_device().startswith("gpu"),
            show_log=False,
        )

    results = _PADDLE_INSTANCE.ocr(image, cls=True)

    tokens: list[OCRToken] = []
    for line in results or []:
        for box, (text, confidence) in line or []:
            tokens.append(OCRToken(text=text, confidence=float(confidence), bbox=to_int_bbox(box)))

    return OCRResult(engine="paddle", tokens=tokens)


def _run_tesseract(image: np.ndarray, lang: str) -> OCRResult:
    if shutil.which("tesseract") is None:
        raise OCRUnavailableError("tesseract binary not available")
    try:
        import pytesseract
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise OCRUnavailableError("pytesseract not installed") from exc

    config = "--oem 1 --psm 6"
    language = "jpn+eng" if lang == "japan" else "eng"
    data = pytesseract.image_to_data(image, lang=language, config=config, output_type=pytesseract.Output.DICT)

    tokens: list[OCRToken] = []
    for i, text in enumerate(data.get("text", [])):
        text = (text or "").strip()
        if not text:
            continue
        conf = max(float(data["conf"][i]), 0.0) / 100.0
        x, y = int(data["left"][i]), int(data["top"][i])
        w, h = int(data["width"][i]), int(data["height"][i])
        tokens.append(OCRToken(text=text, confidence=conf, bbox=(x, y, x + w, y + h)))

    return OCRResult(engine="tesseract", tokens=tokens)
