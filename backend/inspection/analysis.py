from __future__ import annotations

from typing import Any, Mapping

from inspection.normalize import normalize_record
from inspection.parsing import extract_fields
from inspection.scoring import ScoreResult, score_record


def analyze_text(raw_text: str | None) -> ScoreResult:
    """Score free-form OCR text. No notes are recovered, so flags never apply."""
    fields = extract_fields(raw_text)
    return score_record(normalize_record(fields.as_extraction()))


def analyze_extraction(extracted: Mapping[str, Any] | None) -> ScoreResult:
    return score_record(normalize_record(extracted))
