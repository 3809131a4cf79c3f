"""Tests de normalisation."""

from datetime import date, datetime

import pandas as pd

from datamatch.normalize import compact, norm_code, norm_text, normalize, parse_date, safe_str


def test_norm_text_basic() -> None:
    # Espaces multiples → espace simple, lower, strip
    assert norm_text("  Hello  World  ") == "hello world"
    assert norm_text("  ABC  ", lower=False) == "ABC"


def test_norm_text_whitespace() -> None:
    assert norm_text("a\t\n  b") == "a b"
    assert norm_text("  ") == ""


def test_norm_text_nfkc_and_diacritics() -> None:
    assert norm_text("ﬁ") == "fi"  # ligature -> fi
    assert norm_text("Zürich", remove_diacritics=True) == "zurich"


def test_norm_text_none_nan() -> None:
    assert norm_text(None) == ""
    assert norm_text(float("nan")) == ""


def test_normalize_strips_punctuation() -> None:
    assert normalize("  ACME, Corp. ") == "acme corp"
    assert normalize("Acme - Corp") == "acme corp"
    assert normalize("!!!") == ""


def test_compact_removes_spaces() -> None:
    assert compact("Acme Corp.") == "acmecorp"
    assert compact("Acme-Corp") == compact("acme corp")


def test_norm_code_keeps_punctuation() -> None:
    assert norm_code("  MCU-32 ") == "mcu-32"
    assert norm_code(None) == ""


def test_parse_date_variants() -> None:
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("2024-01-15T23:59:00") == date(2024, 1, 15)
    assert parse_date(datetime(2024, 1, 15, 8, 30)) == date(2024, 1, 15)
    assert parse_date(pd.Timestamp("2024-01-15 10:00")) == date(2024, 1, 15)
    assert parse_date(date(2024, 1, 15)) == date(2024, 1, 15)


def test_parse_date_outside_pandas_range() -> None:
    assert parse_date("0001-01-01") == date(1, 1, 1)
    assert parse_date("9999-12-31") == date(9999, 12, 31)
    assert parse_date("2024-13-45") is None


def test_parse_date_invalid() -> None:
    assert parse_date("not a date") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_safe_str() -> None:
    assert safe_str(None) == ""
    assert safe_str(float("nan")) == ""
    assert safe_str(12) == "12"
