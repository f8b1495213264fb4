from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from inspection.normalize import CanonicalRecord

logger = logging.getLogger(__name__)

GRADE_TABLE = MappingProxyType(
    {
        "S": 100,
        "6": 95,
        "5": 90,
        "4.5": 85,
        "4": 75,
        "3.5": 60,
        "3": 45,
        "R": 35,
        "RA": 30,
        "2": 25,
        "1": 15,
        "0": 0,
    }
)
DEFAULT_GRADE_SCORE = 40

# (upper bound km inclusive, sub-score); anything above the last bound scores MILEAGE_FLOOR_SCORE
MILEAGE_BUCKETS = ((80_000, 40), (110_000, 28), (150_000, 18))
MILEAGE_FLOOR_SCORE = 8
DEFAULT_MILEAGE_SCORE = 40

# (minimum model year, sub-score)
YEAR_BUCKETS = ((2018, 20), (2013, 14), (2008, 8))
YEAR_FLOOR_SCORE = 4
DEFAULT_YEAR_SCORE = 20

ADVERSE_KEYWORDS = ("accident", "repair history", "rust", "corrosion", "panel replaced", "flood")
CLEAN_FLAGS_SCORE = 15

GOOD_BUY_THRESHOLD = 80
AVOID_THRESHOLD = 50

SCORE_MIN = 0
SCORE_MAX = 100


class Verdict(str, Enum):
    GOOD_BUY = "Good Buy"
    CAUTION = "Caution"
    AVOID = "Avoid"


@dataclass(frozen=True)
class ScoringPolicy:
    name: str
    grade_weight: float
    mileage_weight: float
    year_weight: float
    flags_weight: float = 0.0

    def __post_init__(self) -> None:
        total = self.grade_weight + self.mileage_weight + self.year_weight + self.flags_weight
        if not math.isclose(total, 1.0):
            raise ValueError(f"Policy {self.name!r} weights sum to {total}, expected 1.0")

    @property
    def uses_flags(self) -> bool:
        return self.flags_weight > 0


WITH_NOTES = ScoringPolicy(
    name="with_notes",
    grade_weight=0.4,
    mileage_weight=0.25,
    year_weight=0.15,
    flags_weight=0.2,
)
WITHOUT_NOTES = ScoringPolicy(
    name="without_notes",
    grade_weight=0.5,
    mileage_weight=0.3,
    year_weight=0.2,
)


@dataclass(frozen=True)
class SubScores:
    grade: int
    mileage: int
    year: int
    flags: int | None = None

    def to_dict(self) -> dict[str, int | None]:
        return {"grade": self.grade, "mileage": self.mileage, "year": self.year, "flags": self.flags}


@dataclass(frozen=True)
class ScoreResult:
    status: Verdict
    score: int
    summary: str
    data: CanonicalRecord
    breakdown: SubScores
    policy: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "score": self.score,
            "summary": self.summary,
            "data": self.data.to_dict(),
            "breakdown": self.breakdown.to_dict(),
            "policy": self.policy,
        }


def grade_score(grade: str | None) -> int:
    if grade is None:
        return DEFAULT_GRADE_SCORE
    return GRADE_TABLE.get(str(grade).upper().strip(), DEFAULT_GRADE_SCORE)


def mileage_score(mileage_km: int | None) -> int:
    if mileage_km is None:
        return DEFAULT_MILEAGE_SCORE
    for upper, value in MILEAGE_BUCKETS:
        if mileage_km <= upper:
            return value
    return MILEAGE_FLOOR_SCORE


def year_score(year: int | None) -> int:
    if year is None:
        return DEFAULT_YEAR_SCORE
    for minimum, value in YEAR_BUCKETS:
        if year >= minimum:
            return value
    return YEAR_FLOOR_SCORE


def find_adverse_keywords(notes: str | None) -> list[str]:
    folded = (notes or "").lower()
    return [keyword for keyword in ADVERSE_KEYWORDS if keyword in folded]


def flags_score(adverse: list[str]) -> int:
    return 0 if adverse else CLEAN_FLAGS_SCORE


def verdict_for(score: int) -> Verdict:
    if score >= GOOD_BUY_THRESHOLD:
        return Verdict.GOOD_BUY
    if score < AVOID_THRESHOLD:
        return Verdict.AVOID
    return Verdict.CAUTION


def select_policy(record: CanonicalRecord) -> ScoringPolicy:
    return WITH_NOTES if record.has_notes else WITHOUT_NOTES


def _round_half_up(value: float) -> int:
    # Weights are decimal fractions; trim float noise before rounding half up.
    return math.floor(round(value, 9) + 0.5)


def _clamp(value: int) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, value))


def build_summary(record: CanonicalRecord, issues_noted: bool) -> str:
    grade = record.auction_grade if record.auction_grade is not None else "N/A"
    mileage = record.mileage_km if record.mileage_km is not None else "N/A"
    year = record.year if record.year is not None else "N/A"
    summary = f"Grade: {grade}, Mileage: {mileage} km, Year: {year}"
    if issues_noted:
        summary += " (issues noted)"
    return summary


def score_record(record: CanonicalRecord, policy: ScoringPolicy | None = None) -> ScoreResult:
    policy = policy or select_policy(record)

    sub_scores = SubScores(
        grade=grade_score(record.auction_grade),
        mileage=mileage_score(record.mileage_km),
        year=year_score(record.year),
    )
    weighted = (
        policy.grade_weight * sub_scores.grade
        + policy.mileage_weight * sub_scores.mileage
        + policy.year_weight * sub_scores.year
    )

    adverse: list[str] = []
    if policy.uses_flags:
        adverse = find_adverse_keywords(record.notes_folded)
        sub_scores = SubScores(
            grade=sub_scores.grade,
            mileage=sub_scores.mileage,
            year=sub_scores.year,
            flags=flags_score(adverse),
        )
        weighted += policy.flags_weight * sub_scores.flags

    score = _clamp(_round_half_up(weighted))
    status = verdict_for(score)
    logger.debug(
        "Scored record with policy %s: %s (%s), adverse=%s", policy.name, score, status.value, adverse
    )
    return ScoreResult(
        status=status,
        score=score,
        summary=build_summary(record, bool(adverse)),
        data=record,
        breakdown=sub_scores,
        policy=policy.name,
    )
