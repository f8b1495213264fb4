from __future__ import annotations

import logging

from inspection.ocr.image_utils import decode_image
from inspection.ocr.ocr_engine import OCRResult, run_ocr
from inspection.ocr.preprocessing import preprocess_sheet_image

logger = logging.getLogger(__name__)


def read_sheet(image_bytes: bytes, lang: str = "japan") -> OCRResult:
    image = preprocess_sheet_image(decode_image(image_bytes))
    result = run_ocr(image, lang=lang)
    logger.info("OCR engine %s produced %d tokens", result.engine, len(result.tokens))
    return result


def read_sheet_text(image_bytes: bytes, lang: str = "japan") -> str:
    """Recognise an inspection-sheet photo and return its text in reading order."""
    return read_sheet(image_bytes, lang=lang).text
