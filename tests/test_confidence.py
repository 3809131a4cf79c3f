"""Tests du classement en niveaux de confiance."""

import pytest

from datamatch.matching.confidence import classify
from datamatch.matching.schema import Confidence


@pytest.mark.parametrize(
    "score,expected",
    [
        (100, Confidence.HIGH),
        (90, Confidence.HIGH),
        (89.99, Confidence.MEDIUM),
        (80, Confidence.MEDIUM),
        (60, Confidence.LOW),
        (59.9, Confidence.VERY_LOW),
        (0, Confidence.VERY_LOW),
        (-5, Confidence.VERY_LOW),
    ],
)
def test_classify_thresholds(score: float, expected: Confidence) -> None:
    assert classify(score) == expected


def test_classify_labels() -> None:
    assert classify(95).value == "High"
    assert classify(10).value == "Very Low"


def test_classify_monotonic() -> None:
    scores = [i / 2 for i in range(0, 201)]
    ranks = [classify(s).rank for s in scores]
    assert ranks == sorted(ranks)
