"""Tests des comparateurs par champ."""

from datetime import date

import pytest

from datamatch.matching import comparators as comparators_module
from datamatch.matching.comparators import (
    bucket_for_score,
    compare_code,
    compare_date,
    compare_exact,
    compare_name,
    compare_text,
    field_status,
)
from datamatch.matching.metrics import similarity_percent
from datamatch.matching.schema import ExternalRecord, InternalRecord


def test_compare_name_exact() -> None:
    assert compare_name("Acme Corp", "acme corp") == (100.0, "exact-match")
    # Ponctuation et espaces ignorés pour l'égalité
    assert compare_name("Acme-Corp.", "Acme Corp") == (100.0, "exact-match")


def test_compare_name_containment_floor() -> None:
    score, bucket = compare_name("Acme Corp", "Acme Corporation")
    assert score == 85.0
    assert bucket == "partial-match"
    assert score >= similarity_percent("acme corp", "acme corporation")


def test_compare_name_levenshtein_fallback() -> None:
    score, _ = compare_name("Globex", "Initech")
    assert score == pytest.approx(similarity_percent("globex", "initech"))


def test_compare_name_missing() -> None:
    assert compare_name("Acme", "") == (0.0, "missing")
    assert compare_name(None, "Acme") == (0.0, "missing")


def test_compare_code() -> None:
    assert compare_code("X100", " x100 ") == (100.0, "exact-match")
    assert compare_code("X100", "X100-B") == (75.0, "partial-match")
    assert compare_code("AB12", "AB13") == (75.0, "medium-match")
    assert compare_code("abcd", "wxyz") == (0.0, "no-match")
    assert compare_code("", "X100") == (0.0, "missing")


def test_compare_text() -> None:
    assert compare_text("Sensors", "sensors!") == (100.0, "exact-match")
    score, bucket = compare_text("Sensor", "Sensors")
    assert score == pytest.approx(6 / 7 * 100)
    assert bucket == "high-match"


def test_compare_exact() -> None:
    assert compare_exact("S1", " s1 ") == (100.0, "exact-match")
    assert compare_exact("S1", "S2") == (0.0, "no-match")
    assert compare_exact("", "S1") == (0.0, "missing")


def test_compare_exact_uses_exact_match(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, str]] = []

    def recording(a: str, b: str) -> float:
        calls.append((a, b))
        return 100.0 if a == b else 0.0

    monkeypatch.setattr(comparators_module, "exact_match", recording)
    assert compare_exact(" S1", "s1 ").score == 100.0
    assert calls == [("s1", "s1")]


@pytest.mark.parametrize(
    "d1,d2,expected",
    [
        ("2024-01-01", "2024-01-01", (100.0, "exact-match")),
        ("2024-01-01T08:00:00", "2024-01-01 23:00:00", (100.0, "exact-match")),
        ("2024-01-01", "2024-01-16", (85.0, "high-match")),
        ("2024-01-01", "2024-01-31", (85.0, "high-match")),
        ("2024-01-01", "2024-02-15", (60.0, "medium-match")),
        ("2024-01-01", "2024-03-16", (40.0, "low-match")),
        ("2024-01-01", "2024-07-19", (0.0, "no-match")),
    ],
)
def test_compare_date_bands(d1: str, d2: str, expected: tuple[float, str]) -> None:
    assert compare_date(d1, d2) == expected
    assert compare_date(d2, d1) == expected


def test_compare_date_accepts_date_objects() -> None:
    assert compare_date(date(2024, 1, 1), "2024-01-16") == (85.0, "high-match")


def test_compare_date_invalid_or_missing() -> None:
    assert compare_date("not a date", "2024-01-01") == (0.0, "invalid")
    assert compare_date("", "2024-01-01") == (0.0, "missing")
    assert compare_date(None, None) == (0.0, "missing")
    assert compare_date("9999-12-31", "9999-12-01") == (85.0, "high-match")


@pytest.mark.parametrize(
    "score,bucket",
    [
        (100, "exact-match"),
        (95, "exact-match"),
        (94.9, "partial-match"),
        (70, "partial-match"),
        (30, "low-match"),
        (0.1, "no-match"),
        (0, "missing"),
    ],
)
def test_bucket_for_score(score: float, bucket: str) -> None:
    assert bucket_for_score(score) == bucket


def test_field_status() -> None:
    ext = ExternalRecord(
        customer_name="Acme Corp",
        product_code="X100",
        entry_date=date(2024, 1, 1),
        sales_code="S1",
        product_group="Sensors",
    )
    internal = InternalRecord(
        cust_short_dim_name="Acme Corporation",
        item_reference_no="X100",
        document_date=date(2024, 1, 20),
        salesperson_dim_name="S2",
        cust_app_dim_name="Sensors",
    )
    status = field_status(ext, internal)
    assert status == {
        "customerName": "partial-match",
        "productCode": "exact-match",
        "documentDate": "high-match",
        "region": "neutral",
        "salesperson": "no-match",
        "product": "exact-match",
    }
