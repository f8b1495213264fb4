from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from numbers import Real
from typing import Any, Mapping

YEAR_MIN = 1970
YEAR_MAX = 2100

EXTRACTION_KEYS = (
    "make",
    "model",
    "year",
    "auction_grade",
    "interior_grade",
    "exterior_grade",
    "mileage_km",
    "notes",
)

_NON_NUMERIC = re.compile(r"[^\d.]")


@dataclass(frozen=True)
class CanonicalRecord:
    make: str | None = None
    model: str | None = None
    year: int | None = None
    auction_grade: str | None = None
    interior_grade: str | None = None
    exterior_grade: str | None = None
    mileage_km: int | None = None
    notes: str = ""
    has_notes: bool = False

    @property
    def notes_folded(self) -> str:
        return self.notes.lower()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("has_notes")
        return data


def coerce_int(value: Any) -> int | None:
    """Coerce a loosely-typed numeric value to a non-negative int.

    Strings keep only digits and dots before parsing, so "65,000 km"
    becomes 65000. Anything that does not parse to a finite number is None.
    """
    if value is None or isinstance(value, bool):
        return None
    raw = value if isinstance(value, Real) else _NON_NUMERIC.sub("", str(value))
    try:
        number = float(raw)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return math.floor(number + 0.5)


def coerce_year(value: Any) -> int | None:
    year = coerce_int(value)
    if year is None or not YEAR_MIN <= year <= YEAR_MAX:
        return None
    return year


def coerce_text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def coerce_grade(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    token = str(value).upper().strip()
    return token or None


def normalize_record(extracted: Mapping[str, Any] | None) -> CanonicalRecord:
    if not isinstance(extracted, Mapping):
        extracted = {}

    notes = extracted.get("notes")
    return CanonicalRecord(
        make=coerce_text(extracted.get("make")),
        model=coerce_text(extracted.get("model")),
        year=coerce_year(extracted.get("year")),
        auction_grade=coerce_grade(extracted.get("auction_grade")),
        interior_grade=coerce_grade(extracted.get("interior_grade")),
        exterior_grade=coerce_grade(extracted.get("exterior_grade")),
        mileage_km=coerce_int(extracted.get("mileage_km")),
        notes=coerce_text(notes) or "",
        has_notes=notes is not None,
    )
