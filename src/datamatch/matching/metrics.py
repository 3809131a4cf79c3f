"""Métriques de chaînes : distance d'édition et pourcentages de similarité."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

WORD_MATCH_MIN_SIMILARITY = 80.0


def edit_distance(a: str, b: str) -> int:
    """Distance de Levenshtein (insertion, suppression, substitution = 1)."""
    return int(Levenshtein.distance(a, b))


def similarity_percent(a: str, b: str) -> float:
    """
    Similarité 0-100 dérivée de la distance d'édition.

    ((max_len - distance) / max_len) * 100. Deux chaînes vides valent 100.
    """
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 100.0
    return (max_len - edit_distance(a, b)) / max_len * 100.0


def exact_match(a: str, b: str) -> float:
    """100 si les chaînes sont identiques, 0 sinon."""
    return 100.0 if a == b else 0.0


def word_similarity(a: str, b: str) -> float:
    """
    Recouvrement de mots (0-100).

    Un mot de `a` compte s'il existe dans `b` un mot égal, contenant, contenu
    ou similaire à plus de 80 %. Le dénominateur est le nombre de mots du
    côté le plus long.
    """
    words_a = a.lower().split()
    words_b = b.lower().split()
    if not words_a or not words_b:
        return 0.0

    matching = 0
    for wa in words_a:
        for wb in words_b:
            if wa == wb or wa in wb or wb in wa or similarity_percent(wa, wb) > WORD_MATCH_MIN_SIMILARITY:
                matching += 1
                break
    return matching / max(len(words_a), len(words_b)) * 100.0
