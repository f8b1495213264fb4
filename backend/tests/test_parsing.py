import pytest

from inspection.parsing import (
    GRADE_MATCHERS,
    MILEAGE_MATCHERS,
    YEAR_MATCHERS,
    SheetFields,
    extract_fields,
    first_match,
    normalize_text,
)


def test_extract_full_japanese_sheet():
    text = "出品番号 12345\n評価点 4.5\n走行 65,000km\n年式 令和元年"
    fields = extract_fields(text)
    assert fields == SheetFields(grade="4.5", mileage_km=65000, year=2019)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Grade: RA", "RA"),
        ("grade: ra", "RA"),
        ("評価点:s", "S"),
        ("評価点 R", "R"),
        ("Evaluation point 3.5", "3.5"),
        ("評価 6", "6"),
    ],
)
def test_labeled_grade(text, expected):
    assert extract_fields(text).grade == expected


def test_labeled_grade_wins_over_other_forms():
    assert extract_fields("R 4点 評価点 5").grade == "5"


def test_suffixed_grade_wins_over_standalone():
    assert extract_fields("R 4点 2015").grade == "4"


def test_standalone_grade_fallback():
    fields = extract_fields("TOYOTA PRIUS 3.5 2012")
    assert fields.grade == "3.5"
    assert fields.year == 2012


def test_grade_not_read_from_inside_numbers():
    assert extract_fields("lot 65,000 2019").grade is None


def test_labeled_mileage_wins_over_bare():
    assert extract_fields("12,345km 走行距離 98,765 km").mileage_km == 98765


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Mileage: 123456 km", 123456),
        ("走行 1,234,567km", 1234567),
        ("１２３，４５６㎞", 123456),
        ("odo 45,000KM", 45000),
        ("走行 99,000km走行", 99000),
    ],
)
def test_mileage_forms(text, expected):
    assert extract_fields(text).mileage_km == expected


@pytest.mark.parametrize("text", ["65 km", "走行 不明", "123456789km"])
def test_mileage_absent_when_numeral_out_of_range(text):
    assert extract_fields(text).mileage_km is None


def test_western_year_wins_over_era():
    assert extract_fields("平成30年 2021").year == 2021


@pytest.mark.parametrize(
    "text, expected",
    [
        ("令和5年", 2023),
        ("Reiwa 5", 2023),
        ("平成30年", 2018),
    ],
)
def test_era_year(text, expected):
    assert extract_fields(text).year == expected


@pytest.mark.parametrize("text", ["", "   ", None, 12345, "lorem ipsum dolor amet"])
def test_unrecognisable_input_yields_empty_fields(text):
    fields = extract_fields(text)
    assert fields == SheetFields()
    assert fields.is_empty


def test_first_match_respects_order():
    calls = []

    def miss(text):
        calls.append("miss")
        return None

    def hit(text):
        calls.append("hit")
        return "A"

    def never(text):
        calls.append("never")
        return "B"

    assert first_match((miss, hit, never), "x") == "A"
    assert calls == ["miss", "hit"]


def test_matcher_tables_are_ordered_by_confidence():
    assert [m.__name__ for m in GRADE_MATCHERS] == [
        "match_labeled_grade",
        "match_suffixed_grade",
        "match_standalone_grade",
    ]
    assert [m.__name__ for m in MILEAGE_MATCHERS] == ["match_labeled_mileage", "match_bare_mileage"]
    assert [m.__name__ for m in YEAR_MATCHERS] == ["match_western_year", "match_era_year"]


def test_normalize_text_folds_full_width_and_keeps_spaces():
    assert normalize_text("評価点：４．５　走行") == "評価点:4.5 走行"


def test_as_extraction_uses_structured_key_names():
    fields = SheetFields(grade="S", mileage_km=10, year=2020)
    assert fields.as_extraction() == {"auction_grade": "S", "mileage_km": 10, "year": 2020}


@pytest.mark.parametrize(
    "text",
    [
        "令和5年 走行 30,000km",
        "乗車定員 2人 2015",
        "H3年 R2年",
    ],
)
def test_digits_attached_to_japanese_text_are_not_grades(text):
    assert extract_fields(text).grade is None


def test_era_digit_does_not_shadow_later_standalone_grade():
    assert extract_fields("令和5年 4 走行 30,000km").grade == "4"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Auction grade: 4. Mileage 65,000 km", "4"),
        ("Grade RA.", "RA"),
        ("S, 65,000km", "S"),
        ("TOYOTA 4.5. 2019", "4.5"),
    ],
)
def test_sentence_punctuation_after_grade(text, expected):
    assert extract_fields(text).grade == expected


def test_half_step_without_five_is_not_a_grade():
    assert extract_fields("Grade 3.7").grade is None


@pytest.mark.parametrize(
    "text",
    [
        "interior grade 4, auction grade 5",
        "Exterior grade 3 auction grade 5",
        "interior_grade: 2 grade: 5",
    ],
)
def test_interior_and_exterior_grades_are_not_the_auction_grade(text):
    assert extract_fields(text).grade == "5"
