"""Fusion d'une correspondance validée en enregistrement consolidé."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pandas as pd

from datamatch.matching.schema import ExternalRecord, InternalRecord, MatchResult

# Champ interne -> champ externe utilisé si l'interne est vide.
FILL_FROM_EXTERNAL: dict[str, str] = {
    "cust_short_dim_name": "customer_name",
    "salesperson_dim_name": "sales_code",
    "prod_chip_name_dim_name": "product_name",
}


def _is_empty(val: object) -> bool:
    return val is None or str(val).strip() == ""


def merge_record(
    internal: InternalRecord,
    external: ExternalRecord,
    *,
    modified: datetime | None = None,
) -> dict[str, Any]:
    """
    Construit l'enregistrement fusionné : l'interne fait foi, l'externe complète.

    Returns:
        Dict des champs internes, complétés, avec opportunity_id / opportunity_name
        et l'horodatage modified.
    """
    merged = internal.to_dict()
    for internal_field, external_field in FILL_FROM_EXTERNAL.items():
        if _is_empty(merged.get(internal_field)):
            merged[internal_field] = getattr(external, external_field)
    merged["opportunity_id"] = external.opportunity_id
    merged["opportunity_name"] = external.opportunity_name
    merged["modified"] = modified or datetime.now(timezone.utc)
    return merged


def merge_matches(results: list[MatchResult]) -> pd.DataFrame:
    """
    Une ligne fusionnée par correspondance, avec score, confiance et type.

    Args:
        results: Correspondances (auto ou manuelles).

    Returns:
        Nouveau DataFrame (vide avec colonnes si aucune correspondance).
    """
    rows = []
    now = datetime.now(timezone.utc)
    for r in results:
        row = merge_record(r.internal, r.external, modified=now)
        row["similarity_score"] = round(r.score, 2)
        row["confidence"] = r.confidence.value
        row["match_type"] = r.match_type.value
        rows.append(row)
    columns = list(InternalRecord.__dataclass_fields__) + [
        "opportunity_id",
        "opportunity_name",
        "modified",
        "similarity_score",
        "confidence",
        "match_type",
    ]
    return pd.DataFrame(rows, columns=columns)


def build_mapping_csv(
    results: list[MatchResult],
    output_path: str,
) -> None:
    """
    Génère mapping.csv avec opportunity_id, row_key, score, confidence, match_type.
    """
    rows = []
    for r in results:
        rows.append(
            {
                "opportunity_id": r.external.opportunity_id,
                "row_key": r.internal.row_key,
                "score": round(r.score, 2),
                "confidence": r.confidence.value,
                "match_type": r.match_type.value,
            }
        )
    df = pd.DataFrame(rows, columns=["opportunity_id", "row_key", "score", "confidence", "match_type"])
    df.to_csv(output_path, index=False, encoding="utf-8")
