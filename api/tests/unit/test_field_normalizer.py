"""
Tests de normalizacion de fechas y horas de la hoja.
"""
from datetime import date

import pytest

from attendance_sync.application.services.field_normalizer import (
    is_canonical_date,
    normalize_date,
    normalize_time,
    parse_loose_date,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("16 Dec 25", "2025-12-16"),
        ("1 jan 2026", "2026-01-01"),
        ("  3 Mar 24  ", "2024-03-03"),
        ("2025-12-16", "2025-12-16"),
        ("", ""),
        ("   ", ""),
        (None, ""),
    ],
)
def test_normalize_date_known_formats(raw, expected) -> None:
    assert normalize_date(raw) == expected


def test_normalize_date_unknown_format_is_returned_trimmed() -> None:
    assert normalize_date(" 12/16/2025 ") == "12/16/2025"
    assert normalize_date("16 Foo 25") == "16 Foo 25"


def test_normalize_date_is_idempotent() -> None:
    for raw in ["16 Dec 25", "2025-12-16", "garbage", "", "5 May 2024"]:
        once = normalize_date(raw)
        assert normalize_date(once) == once


def test_is_canonical_date_rejects_impossible_dates() -> None:
    assert is_canonical_date("2025-02-28")
    assert not is_canonical_date("2025-02-30")
    assert not is_canonical_date("16 Dec 25")
    assert not is_canonical_date("")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9:51 pm", "21:51:00"),
        ("9:51PM", "21:51:00"),
        ("12:00 am", "00:00:00"),
        ("12:30 pm", "12:30:00"),
        ("9:51:00 PM", "21:51:00"),
        ("12:00:30 am", "00:00:30"),
        ("11:59:59 pm", "23:59:59"),
        ("9:05 am", "09:05:00"),
        ("9:5", "09:05:00"),
        ("21:51", "21:51:00"),
        ("08:15:30", "08:15:30"),
        ("23:59:59", "23:59:59"),
    ],
)
def test_normalize_time_valid(raw, expected) -> None:
    assert normalize_time(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [None, "", "  ", "-", "null", "NULL", "-0:20:00", "25:00:00", "10:60", "10:00:61", "abc", "930", "x:y"],
)
def test_normalize_time_invalid_returns_none(raw) -> None:
    assert normalize_time(raw) is None


def test_normalize_time_ampm_without_match_falls_back_to_colon_rule() -> None:
    # "am" aparece pero no con el formato H:MM am
    assert normalize_time("am 10:15:00") is None
    assert normalize_time("10:15 a.m.") is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-01-31", date(2025, 1, 31)),
        ("16 Dec 25", date(2025, 12, 16)),
        ("2025-01-31T10:00:00Z", date(2025, 1, 31)),
        ("31/01/2025", date(2025, 1, 31)),
        ("January 5, 2025", date(2025, 1, 5)),
    ],
)
def test_parse_loose_date_accepts_common_formats(raw, expected) -> None:
    assert parse_loose_date(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "not-a-date", "undefined", "2025-13-01"])
def test_parse_loose_date_never_raises(raw) -> None:
    assert parse_loose_date(raw) is None


@pytest.mark.parametrize(
    "raw",
    ["25:30 pm", "0:30 am", "13:00 pm", "9:60 pm", "9:51:61 pm", "9:51 pm extra", "x 9:51 pm"],
)
def test_normalize_time_ampm_out_of_range_or_partial_returns_none(raw) -> None:
    """Una hora AM/PM mal formada no puede producir un TIME invalido."""
    assert normalize_time(raw) is None
