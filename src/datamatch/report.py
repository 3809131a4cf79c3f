"""Génération du rapport et onglet REPORT."""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from datamatch import __version__
from datamatch.config import MatchingConfig
from datamatch.matching.schema import Confidence, MatchResult


def _summary(results: list[MatchResult], n_external: int, n_internal: int) -> dict[str, float | int]:
    by_conf = {c: sum(1 for r in results if r.confidence == c) for c in Confidence}
    scores = [r.score for r in results]
    return {
        "nb_external": n_external,
        "nb_internal": n_internal,
        "nb_matched": len(results),
        "nb_unmatched_external": max(n_external - len(results), 0),
        "nb_high": by_conf[Confidence.HIGH],
        "nb_medium": by_conf[Confidence.MEDIUM],
        "nb_low": by_conf[Confidence.LOW],
        "nb_very_low": by_conf[Confidence.VERY_LOW],
        "average_score": round(sum(scores) / len(scores), 2) if scores else 0.0,
    }


def build_report_df(
    results: list[MatchResult],
    config: MatchingConfig,
    *,
    n_external: int,
    n_internal: int,
) -> pd.DataFrame:
    """
    Construit le DataFrame pour l'onglet REPORT.

    Contient : nb externes / internes, nb correspondances par confiance,
    score moyen, seuils, poids, horodatage, version.
    """
    rows: list[tuple[str, object]] = [("Metric", "Value")]
    rows.extend(_summary(results, n_external, n_internal).items())
    rows.extend(
        [
            ("", ""),
            ("Parameters", ""),
            ("auto_threshold", config.auto_threshold),
            ("suggest_threshold", config.suggest_threshold),
            ("max_suggestions", config.max_suggestions),
            ("", ""),
            ("Weights", ""),
        ]
    )
    for name, w in config.external_weights.items():
        rows.append((f"weight_{name}", w))
    rows.extend(
        [
            ("", ""),
            ("timestamp", datetime.now().isoformat()),
            ("version", __version__),
        ]
    )
    return pd.DataFrame(rows, columns=["Key", "Value"])


def print_report_console(
    results: list[MatchResult],
    config: MatchingConfig,
    *,
    n_external: int,
    n_internal: int,
) -> None:
    """Affiche un résumé du rapport en console."""
    s = _summary(results, n_external, n_internal)
    print("\n=== DataMatch Report ===")
    print(f"  Opportunités:         {s['nb_external']}")
    print(f"  Enregistrements:      {s['nb_internal']}")
    print(f"  Correspondances:      {s['nb_matched']}")
    print(f"  Sans correspondance:  {s['nb_unmatched_external']}")
    print(f"  High / Medium / Low:  {s['nb_high']} / {s['nb_medium']} / {s['nb_low']}")
    print(f"  Score moyen:          {s['average_score']}")
    print(f"  Seuil auto:           {config.auto_threshold}")
    print(f"  Version:              {__version__}")
    print(f"  Timestamp:            {datetime.now().isoformat()}")
    print("========================\n")
