"""Normalisation de texte, de codes et de dates avant comparaison."""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Any

import pandas as pd

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACES_RE = re.compile(r"\s+")


def _is_missing(s: Any) -> bool:
    return s is None or (isinstance(s, float) and (s != s or s == float("inf"))) or s is pd.NaT


def _remove_diacritics(s: str) -> str:
    """Retire les diacritiques (accents) d'une chaîne."""
    nfd = unicodedata.normalize("NFD", s)
    return "".join(c for c in nfd if unicodedata.category(c) != "Mn")


def norm_text(
    s: Any,
    *,
    lower: bool = True,
    strip: bool = True,
    remove_diacritics: bool = False,
) -> str:
    """
    Normalise un texte : NFKC, espaces multiples → espace simple, lower, strip.

    Args:
        s: Valeur à normaliser (convertie en str si numérique).
        lower: Mettre en minuscules.
        strip: Supprimer espaces en début/fin.
        remove_diacritics: Supprimer les accents.

    Returns:
        Chaîne normalisée.
    """
    if _is_missing(s):
        return ""
    text = str(s).strip() if strip else str(s)
    text = unicodedata.normalize("NFKC", text)
    text = _SPACES_RE.sub(" ", text)
    if strip:
        text = text.strip()
    if lower:
        text = text.lower()
    if remove_diacritics:
        text = _remove_diacritics(text)
    return text


def normalize(s: Any) -> str:
    """
    Forme de comparaison : minuscules, sans ponctuation, espaces compactés.

    "  ACME, Corp. " → "acme corp"
    """
    text = _PUNCT_RE.sub("", norm_text(s))
    return _SPACES_RE.sub(" ", text).strip()


def compact(s: Any) -> str:
    """Forme normalisée sans aucun espace ("Acme Corp" → "acmecorp")."""
    return normalize(s).replace(" ", "")


def norm_code(s: Any) -> str:
    """Codes produit / identifiants : minuscules et strip uniquement."""
    if _is_missing(s):
        return ""
    return str(s).strip().lower()


def parse_date(value: Any) -> date | None:
    """
    Convertit une valeur en date calendaire (l'heure est ignorée).

    Les dates ISO (AAAA-MM-JJ) sont lues directement, y compris hors de la
    plage des Timestamp pandas (ex. 0001-01-01, 9999-12-31) ; les autres
    formats passent par pandas.

    Returns:
        La date, ou None si la valeur est vide ou illisible.
    """
    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def safe_str(val: Any) -> str:
    """Convertit une valeur en chaîne pour affichage/stockage."""
    if _is_missing(val):
        return ""
    return str(val)
