from __future__ import annotations

import re

ERA_OFFSETS = {
    "heisei": 1988,
    "reiwa": 2018,
}

ERA_ALIASES = {
    "平成": "heisei",
    "heisei": "heisei",
    "h": "heisei",
    "令和": "reiwa",
    "reiwa": "reiwa",
    "r": "reiwa",
}

WESTERN_YEAR_PATTERN = re.compile(r"(?<!\d)(20\d{2})(?!\d)")

# 令和5年 / 平成30年 / 令和元年
KANJI_ERA_PATTERN = re.compile(r"(平成|令和)\s*(\d{1,2}|元)\s*年")
# Reiwa 5 / Heisei 30年
ROMAN_ERA_PATTERN = re.compile(r"\b(heisei|reiwa)\s*(\d{1,2})(?!\d)(?:\s*年)?", re.IGNORECASE)
# R5年 / H30年
LETTER_ERA_PATTERN = re.compile(r"(?<![A-Za-z])([HR])\s*(\d{1,2})\s*年", re.IGNORECASE)


def parse_era_year(era: str | None, era_year: str | int | None) -> int | None:
    if not era or era_year is None:
        return None
    key = ERA_ALIASES.get(era.strip().lower()) or ERA_ALIASES.get(era.strip())
    if key is None:
        return None
    if era_year == "元":
        number = 1
    else:
        try:
            number = int(era_year)
        except (TypeError, ValueError):
            return None
    if number < 1:
        return None
    return ERA_OFFSETS[key] + number


def parse_western_year(text: str | None) -> int | None:
    if not text:
        return None
    m = WESTERN_YEAR_PATTERN.search(text)
    if not m:
        return None
    return int(m.group(1))


def parse_era_text(text: str | None) -> int | None:
    """Convert the first era-notation year in ``text`` to a Western year."""
    if not text:
        return None
    for pattern in (KANJI_ERA_PATTERN, ROMAN_ERA_PATTERN, LETTER_ERA_PATTERN):
        m = pattern.search(text)
        if m:
            return parse_era_year(m.group(1), m.group(2))
    return None
