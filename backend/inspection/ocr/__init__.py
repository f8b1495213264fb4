from inspection.ocr.image_utils import OCRToken, decode_image
from inspection.ocr.ocr_engine import (
    OCRResult,
    OCRUnavailableError,
    group_tokens_by_row,
    run_ocr,
    tokens_to_text,
)
from inspection.ocr.preprocessing import preprocess_sheet_image
from inspection.ocr.reader import read_sheet, read_sheet_text

__all__ = [
    "OCRToken",
    "OCRResult",
    "OCRUnavailableError",
    "decode_image",
    "group_tokens_by_row",
    "preprocess_sheet_image",
    "read_sheet",
    "read_sheet_text",
    "run_ocr",
    "tokens_to_text",
]
