"""Comparateurs par champ : chaque paire de valeurs brutes → (score 0-100, catégorie)."""

from __future__ import annotations

from typing import Any, Callable

from datamatch.matching.metrics import exact_match, similarity_percent
from datamatch.matching.schema import Comparison, ExternalRecord, InternalRecord
from datamatch.normalize import compact, norm_code, normalize, parse_date, safe_str

NAME_CONTAINMENT_BONUS = 85.0
CODE_CONTAINMENT_SCORE = 75.0

Comparator = Callable[[Any, Any], Comparison]

# (écart max en jours, score, catégorie)
DATE_BANDS: tuple[tuple[int, float, str], ...] = (
    (0, 100.0, "exact-match"),
    (30, 85.0, "high-match"),
    (60, 60.0, "medium-match"),
    (90, 40.0, "low-match"),
)

MISSING = Comparison(0.0, "missing")
INVALID = Comparison(0.0, "invalid")


def _similarity_bucket(score: float) -> str:
    if score >= 80:
        return "high-match"
    if score >= 60:
        return "medium-match"
    return "no-match"


def _blank(value: Any) -> bool:
    return not safe_str(value).strip()


def compare_name(value1: Any, value2: Any) -> Comparison:
    """
    Noms de clients.

    Égalité (sans ponctuation ni espaces) → 100. Inclusion de l'un dans
    l'autre → max(similarité Levenshtein, 85). Sinon similarité Levenshtein.
    """
    if _blank(value1) or _blank(value2):
        return MISSING
    c1, c2 = compact(value1), compact(value2)
    if not c1 or not c2:
        return MISSING
    if c1 == c2:
        return Comparison(100.0, "exact-match")
    lev = similarity_percent(normalize(value1), normalize(value2))
    if c1 in c2 or c2 in c1:
        return Comparison(max(lev, NAME_CONTAINMENT_BONUS), "partial-match")
    return Comparison(lev, _similarity_bucket(lev))


def compare_code(value1: Any, value2: Any) -> Comparison:
    """Codes / identifiants : égalité → 100, inclusion → 75, sinon Levenshtein."""
    c1, c2 = norm_code(value1), norm_code(value2)
    if not c1 or not c2:
        return MISSING
    if c1 == c2:
        return Comparison(100.0, "exact-match")
    if c1 in c2 or c2 in c1:
        return Comparison(CODE_CONTAINMENT_SCORE, "partial-match")
    lev = similarity_percent(c1, c2)
    return Comparison(lev, _similarity_bucket(lev))


def compare_text(value1: Any, value2: Any) -> Comparison:
    """Texte libre normalisé : égalité → 100, sinon Levenshtein."""
    t1, t2 = normalize(value1), normalize(value2)
    if not t1 or not t2:
        return MISSING
    if t1 == t2:
        return Comparison(100.0, "exact-match")
    lev = similarity_percent(t1, t2)
    return Comparison(lev, _similarity_bucket(lev))


def compare_exact(value1: Any, value2: Any) -> Comparison:
    """Champs catégoriels (code vendeur...) : 100 si égaux après lower/strip, 0 sinon."""
    c1, c2 = norm_code(value1), norm_code(value2)
    if not c1 or not c2:
        return MISSING
    score = exact_match(c1, c2)
    return Comparison(score, "exact-match" if score else "no-match")


def compare_date(value1: Any, value2: Any) -> Comparison:
    """
    Proximité de dates (précision jour).

    0 jour → 100, ≤ 30 → 85, ≤ 60 → 60, ≤ 90 → 40, au-delà → 0.
    Valeur vide → "missing", valeur illisible → "invalid".
    """
    if _blank(value1) or _blank(value2):
        return MISSING
    d1, d2 = parse_date(value1), parse_date(value2)
    if d1 is None or d2 is None:
        return INVALID
    days = abs((d2 - d1).days)
    for max_days, score, bucket in DATE_BANDS:
        if days <= max_days:
            return Comparison(score, bucket)
    return Comparison(0.0, "no-match")


def bucket_for_score(score: float) -> str:
    """Catégorie d'affichage pour un score déjà calculé."""
    if score >= 95:
        return "exact-match"
    if score >= 70:
        return "partial-match"
    if score >= 30:
        return "low-match"
    if score > 0:
        return "no-match"
    return "missing"


def _status(value1: Any, value2: Any, comparator: Comparator) -> str:
    if _blank(value1) and _blank(value2):
        return "neutral"
    return comparator(value1, value2).bucket


def field_status(external: ExternalRecord, internal: InternalRecord) -> dict[str, str]:
    """
    Statut qualitatif par champ pour l'affichage d'une paire.

    Les deux côtés vides → "neutral", un seul côté vide → "missing".
    """
    return {
        "customerName": _status(
            external.customer_name,
            internal.cust_short_dim_name or internal.sell_to_cust_name,
            compare_name,
        ),
        "productCode": _status(external.product_code, internal.item_reference_no, compare_code),
        "documentDate": _status(external.entry_date, internal.document_date, compare_date),
        "region": _status(external.country, internal.region_dim_name3, compare_text),
        "salesperson": _status(external.sales_code, internal.salesperson_dim_name, compare_exact),
        "product": _status(
            external.product_group,
            internal.cust_app_dim_name or internal.prod_chip_name_dim_name,
            compare_text,
        ),
    }
