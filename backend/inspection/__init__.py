from inspection.analysis import analyze_extraction, analyze_text
from inspection.date_parsing import parse_era_text, parse_era_year, parse_western_year
from inspection.normalize import CanonicalRecord, normalize_record
from inspection.parsing import SheetFields, extract_fields, normalize_text
from inspection.scoring import (
    GRADE_TABLE,
    WITH_NOTES,
    WITHOUT_NOTES,
    ScoreResult,
    ScoringPolicy,
    SubScores,
    Verdict,
    score_record,
    select_policy,
)

__all__ = [
    "analyze_extraction",
    "analyze_text",
    "parse_era_text",
    "parse_era_year",
    "parse_western_year",
    "CanonicalRecord",
    "normalize_record",
    "SheetFields",
    "extract_fields",
    "normalize_text",
    "GRADE_TABLE",
    "WITH_NOTES",
    "WITHOUT_NOTES",
    "ScoreResult",
    "ScoringPolicy",
    "SubScores",
    "Verdict",
    "score_record",
    "select_policy",
]
