"""Classement d'un score agrégé en niveau de confiance."""

from __future__ import annotations

from datamatch.matching.schema import Confidence

HIGH_MIN = 90.0
MEDIUM_MIN = 80.0
LOW_MIN = 60.0


def classify(score: float) -> Confidence:
    """High ≥ 90, Medium ≥ 80, Low ≥ 60, sinon Very Low (y compris hors bornes ou NaN)."""
    if score >= HIGH_MIN:
        return Confidence.HIGH
    if score >= MEDIUM_MIN:
        return Confidence.MEDIUM
    if score >= LOW_MIN:
        return Confidence.LOW
    return Confidence.VERY_LOW
