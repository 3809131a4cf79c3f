"""Module de matching et linkage."""

from datamatch.matching.confidence import classify
from datamatch.matching.linker import Linker, find_best_matches
from datamatch.matching.schema import (
    Confidence,
    ExternalRecord,
    FieldScore,
    InternalRecord,
    MatchCandidate,
    MatchResult,
    MatchStatus,
    MatchType,
    Suggestion,
)
from datamatch.matching.scorers import score_external_internal, score_internal_internal

__all__ = [
    "Confidence",
    "ExternalRecord",
    "FieldScore",
    "InternalRecord",
    "Linker",
    "MatchCandidate",
    "MatchResult",
    "MatchStatus",
    "MatchType",
    "Suggestion",
    "classify",
    "find_best_matches",
    "score_external_internal",
    "score_internal_internal",
]
