"""Calcul du score agrégé (pondéré) entre deux enregistrements."""

from __future__ import annotations

from typing import Mapping

from datamatch.config import EXTERNAL_INTERNAL_WEIGHTS, INTERNAL_INTERNAL_WEIGHTS
from datamatch.matching.comparators import Comparator, compare_code, compare_exact, compare_name, compare_text
from datamatch.matching.schema import ExternalRecord, FieldScore, InternalRecord
from datamatch.normalize import safe_str

# Même comparateur par champ quel que soit le couple de types comparé.
FIELD_COMPARATORS: dict[str, Comparator] = {
    "customer_name": compare_name,
    "product_group": compare_text,
    "product_name": compare_code,
    "salesperson": compare_exact,
}


def _external_values(r: ExternalRecord) -> dict[str, str]:
    return {
        "customer_name": r.customer_name,
        "product_group": r.product_group,
        "product_name": r.product_name,
        "salesperson": r.sales_code,
    }


def _internal_values(r: InternalRecord) -> dict[str, str]:
    return {
        "customer_name": r.cust_short_dim_name,
        "product_group": r.cust_app_dim_name,
        "product_name": r.prod_chip_name_dim_name,
        "salesperson": r.salesperson_dim_name,
    }


def _weighted(
    left: dict[str, str],
    right: dict[str, str],
    weights: Mapping[str, float],
) -> tuple[float, list[FieldScore]]:
    """
    Moyenne pondérée des champs renseignés des deux côtés.

    Un champ vide d'un côté n'entre ni au numérateur ni au dénominateur.
    """
    total_weight = 0.0
    weighted_sum = 0.0
    details: list[FieldScore] = []

    for name, weight in weights.items():
        v1 = safe_str(left.get(name)).strip()
        v2 = safe_str(right.get(name)).strip()
        comparison = FIELD_COMPARATORS[name](v1, v2)
        details.append(FieldScore(name, v1, v2, comparison.score, comparison.bucket))
        if not v1 or not v2:
            continue
        total_weight += weight
        weighted_sum += comparison.score * weight

    if total_weight == 0:
        return 0.0, details
    return max(0.0, min(100.0, weighted_sum / total_weight)), details


def score_external_internal_details(
    external: ExternalRecord,
    internal: InternalRecord,
    weights: Mapping[str, float] | None = None,
) -> tuple[float, list[FieldScore]]:
    """
    Score opportunité ↔ enregistrement interne, avec le détail par champ.

    Returns:
        (score_global, [FieldScore])
    """
    if not isinstance(external, ExternalRecord) or not isinstance(internal, InternalRecord):
        raise TypeError(
            f"ExternalRecord et InternalRecord attendus (got {type(external).__name__}, {type(internal).__name__})"
        )
    return _weighted(
        _external_values(external),
        _internal_values(internal),
        EXTERNAL_INTERNAL_WEIGHTS if weights is None else weights,
    )


def score_external_internal(
    external: ExternalRecord,
    internal: InternalRecord,
    weights: Mapping[str, float] | None = None,
) -> float:
    """Score 0-100 : nom client 0.40, groupe produit 0.20, produit 0.20, vendeur 0.20."""
    return score_external_internal_details(external, internal, weights)[0]


def score_internal_internal_details(
    record1: InternalRecord,
    record2: InternalRecord,
    weights: Mapping[str, float] | None = None,
) -> tuple[float, list[FieldScore]]:
    if not isinstance(record1, InternalRecord) or not isinstance(record2, InternalRecord):
        raise TypeError(
            f"InternalRecord attendus (got {type(record1).__name__}, {type(record2).__name__})"
        )
    return _weighted(
        _internal_values(record1),
        _internal_values(record2),
        INTERNAL_INTERNAL_WEIGHTS if weights is None else weights,
    )


def score_internal_internal(
    record1: InternalRecord,
    record2: InternalRecord,
    weights: Mapping[str, float] | None = None,
) -> float:
    """Score 0-100 entre deux enregistrements internes : 40 / 30 / 20 / 10."""
    return score_internal_internal_details(record1, record2, weights)[0]
