from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Callable, Iterable

from inspection.date_parsing import parse_era_text, parse_western_year

Matcher = Callable[[str], "str | int | None"]

# Longest alternatives first so "4.5" is not read as "4" and "RA" not as "R".
GRADE_TOKEN = r"(RA|R|S|[0-6]\.5|[0-6])"

# A trailing "." or "," only continues the token when a digit follows it,
# so "grade: 4." and "S, 65,000km" still yield a grade.
GRADE_LABEL_PATTERN = re.compile(
    r"(?:評価点|評価|evaluation\s*point|auction\s*grade|(?<!interior[\s_])(?<!exterior[\s_])grade)"
    r"\s*[:=]?\s*" + GRADE_TOKEN + r"(?![A-Za-z])(?![.,]?\d)",
    re.IGNORECASE,
)
GRADE_SUFFIX_PATTERN = re.compile(r"(?<![0-9A-Za-z.])" + GRADE_TOKEN + r"\s*点", re.IGNORECASE)
# \w is Unicode-aware: digits glued to kanji or kana ("令和5年", "2人") are not grades.
GRADE_STANDALONE_PATTERN = re.compile(
    r"(?<![\w.,])" + GRADE_TOKEN + r"(?!\w)(?![.,]\d)", re.IGNORECASE
)

MILEAGE_NUMERAL = r"(\d{1,3}(?:,\d{3}){1,2}|\d{3,8})"
MILEAGE_UNIT = r"\s*km(?![A-Za-z])"

MILEAGE_LABEL_PATTERN = re.compile(
    r"(?:走行距離|走行|distance\s*traveled|mileage|odometer).*?(?<![\d,])" + MILEAGE_NUMERAL + MILEAGE_UNIT,
    re.IGNORECASE | re.DOTALL,
)
MILEAGE_BARE_PATTERN = re.compile(r"(?<![\d,])" + MILEAGE_NUMERAL + MILEAGE_UNIT, re.IGNORECASE)


@dataclass(frozen=True)
class SheetFields:
    grade: str | None = None
    mileage_km: int | None = None
    year: int | None = None

    def as_extraction(self) -> dict[str, str | int | None]:
        return {
            "auction_grade": self.grade,
            "mileage_km": self.mileage_km,
            "year": self.year,
        }

    @property
    def is_empty(self) -> bool:
        return self.grade is None and self.mileage_km is None and self.year is None


def normalize_text(text: str | None) -> str:
    """NFKC-fold OCR text and unify the punctuation variants seen on sheets.

    Whitespace is kept: standalone grade tokens rely on it for boundaries.
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text)
    return (
        text.replace("　", " ")
        .replace("：", ":")
        .replace("／", "/")
        .replace("‐", "-")
        .replace("－", "-")
        .replace("−", "-")
        .replace("，", ",")
        .replace("．", ".")
    )


def parse_grade_token(value: str | None) -> str | None:
    if value is None:
        return None
    token = value.strip().upper()
    return token or None


def parse_mileage_numeral(value: str | None) -> int | None:
    if not value:
        return None
    digits = value.replace(",", "")
    if not digits.isdigit():
        return None
    return int(digits)


def _search_group(pattern: re.Pattern[str], text: str) -> str | None:
    m = pattern.search(text)
    return m.group(1) if m else None


def match_labeled_grade(text: str) -> str | None:
    return parse_grade_token(_search_group(GRADE_LABEL_PATTERN, text))


def match_suffixed_grade(text: str) -> str | None:
    return parse_grade_token(_search_group(GRADE_SUFFIX_PATTERN, text))


def match_standalone_grade(text: str) -> str | None:
    return parse_grade_token(_search_group(GRADE_STANDALONE_PATTERN, text))


def match_labeled_mileage(text: str) -> int | None:
    return parse_mileage_numeral(_search_group(MILEAGE_LABEL_PATTERN, text))


def match_bare_mileage(text: str) -> int | None:
    return parse_mileage_numeral(_search_group(MILEAGE_BARE_PATTERN, text))


def match_western_year(text: str) -> int | None:
    return parse_western_year(text)


def match_era_year(text: str) -> int | None:
    return parse_era_text(text)


GRADE_MATCHERS: tuple[Matcher, ...] = (
    match_labeled_grade,
    match_suffixed_grade,
    match_standalone_grade,
)
MILEAGE_MATCHERS: tuple[Matcher, ...] = (
    match_labeled_mileage,
    match_bare_mileage,
)
YEAR_MATCHERS: tuple[Matcher, ...] = (
    match_western_year,
    match_era_year,
)


def first_match(matchers: Iterable[Matcher], text: str):
    for matcher in matchers:
        value = matcher(text)
        if value is not None:
            return value
    return None


def extract_fields(raw_text: str | None) -> SheetFields:
    if not isinstance(raw_text, str):
        return SheetFields()
    text = normalize_text(raw_text)
    if not text.strip():
        return SheetFields()
    return SheetFields(
        grade=first_match(GRADE_MATCHERS, text),
        mileage_km=first_match(MILEAGE_MATCHERS, text),
        year=first_match(YEAR_MATCHERS, text),
    )
