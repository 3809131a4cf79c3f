"""Tests du module report."""

import pytest

from datamatch.config import MatchingConfig
from datamatch.matching.confidence import classify
from datamatch.matching.schema import ExternalRecord, InternalRecord, MatchResult
from datamatch.report import build_report_df, print_report_console


def _result(score: float) -> MatchResult:
    return MatchResult(ExternalRecord(), InternalRecord(), score, classify(score))


@pytest.fixture
def sample_results() -> list[MatchResult]:
    return [_result(98), _result(92), _result(85), _result(81)]


def test_build_report_df_counts(sample_results: list[MatchResult]) -> None:
    df = build_report_df(sample_results, MatchingConfig(), n_external=6, n_internal=10)
    values = dict(zip(df["Key"], df["Value"]))
    assert values["nb_external"] == 6
    assert values["nb_internal"] == 10
    assert values["nb_matched"] == 4
    assert values["nb_unmatched_external"] == 2
    assert values["nb_high"] == 2
    assert values["nb_medium"] == 2
    assert values["average_score"] == 89.0


def test_build_report_df_contains_params(sample_results: list[MatchResult]) -> None:
    df = build_report_df(sample_results, MatchingConfig(), n_external=4, n_internal=4)
    keys = df["Key"].tolist()
    assert "auto_threshold" in keys
    assert "weight_customer_name" in keys
    assert "version" in keys
    assert "timestamp" in keys


def test_print_report_console_no_error(sample_results: list[MatchResult], capsys: pytest.CaptureFixture) -> None:
    print_report_console(sample_results, MatchingConfig(), n_external=6, n_internal=10)
    out = capsys.readouterr().out
    assert "DataMatch Report" in out
    assert "Correspondances" in out
    assert "4" in out
