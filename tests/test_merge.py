"""Tests de la fusion des correspondances."""

from pathlib import Path

import pandas as pd
import pytest

from datamatch.matching.linker import Linker
from datamatch.matching.schema import ExternalRecord, InternalRecord, MatchResult
from datamatch.merge import build_mapping_csv, merge_matches, merge_record


@pytest.fixture
def external() -> ExternalRecord:
    return ExternalRecord(
        opportunity_id="OPP-1",
        opportunity_name="Acme sensors",
        customer_name="Acme Corp",
        product_name="X100",
        sales_code="S1",
    )


@pytest.fixture
def internal() -> InternalRecord:
    return InternalRecord(
        row_key="R1",
        cust_short_dim_name="Acme Corporation",
        cust_app_dim_name="Sensors",
        prod_chip_name_dim_name="",
        salesperson_dim_name="",
        quantity=100.0,
    )


@pytest.fixture
def results(external: ExternalRecord, internal: InternalRecord) -> list[MatchResult]:
    return [Linker().manual_match(external, internal)]


def test_merge_record_internal_wins_external_fills(external: ExternalRecord, internal: InternalRecord) -> None:
    merged = merge_record(internal, external)
    assert merged["cust_short_dim_name"] == "Acme Corporation"
    assert merged["prod_chip_name_dim_name"] == "X100"
    assert merged["salesperson_dim_name"] == "S1"
    assert merged["cust_app_dim_name"] == "Sensors"
    assert merged["quantity"] == 100.0
    assert merged["opportunity_id"] == "OPP-1"
    assert merged["opportunity_name"] == "Acme sensors"
    assert merged["modified"] is not None


def test_merge_record_does_not_mutate(external: ExternalRecord, internal: InternalRecord) -> None:
    merge_record(internal, external)
    assert internal.prod_chip_name_dim_name == ""


def test_merge_matches(results: list[MatchResult]) -> None:
    df = merge_matches(results)
    assert len(df) == 1
    assert df.iloc[0]["row_key"] == "R1"
    assert df.iloc[0]["match_type"] == "manual"
    assert "similarity_score" in df.columns
    assert "confidence" in df.columns


def test_merge_matches_empty() -> None:
    df = merge_matches([])
    assert df.empty
    assert "opportunity_id" in df.columns


def test_build_mapping_csv(results: list[MatchResult], tmp_path: Path) -> None:
    path = tmp_path / "mapping.csv"
    build_mapping_csv(results, str(path))
    df = pd.read_csv(path, dtype=str)
    assert list(df.columns) == ["opportunity_id", "row_key", "score", "confidence", "match_type"]
    assert df.iloc[0]["row_key"] == "R1"
