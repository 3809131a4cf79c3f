"""Moteur de linkage : meilleures correspondances, suggestions, matching manuel."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from datamatch.config import MatchInputError, MatchingConfig
from datamatch.matching.confidence import classify
from datamatch.matching.metrics import word_similarity
from datamatch.matching.schema import (
    ExternalRecord,
    InternalRecord,
    MatchCandidate,
    MatchResult,
    MatchType,
    Suggestion,
)
from datamatch.matching.scorers import (
    score_external_internal_details,
    score_internal_internal_details,
)
from datamatch.normalize import compact, normalize

logger = logging.getLogger(__name__)

ENGINE_NAME = "SimilarityEngine"
ALGORITHM = "Weighted"
SHARED_WORDS_MIN = 50.0


def _require_collection(value: object, name: str) -> None:
    if value is None:
        raise MatchInputError(f"{name} est requis (got None)")
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise MatchInputError(f"{name} doit être une collection (got {type(value).__name__})")


def match_reasons(record1: InternalRecord, record2: InternalRecord) -> list[str]:
    """Explications lisibles d'une suggestion (basées sur le nom client)."""
    reasons: list[str] = []
    n1 = compact(record1.cust_short_dim_name)
    n2 = compact(record2.cust_short_dim_name)
    if not n1 or not n2:
        return reasons
    if n1 == n2:
        reasons.append("Exact customer name match")
    elif n1 in n2 or n2 in n1:
        reasons.append("Partial customer name match")
    elif (
        word_similarity(normalize(record1.cust_short_dim_name), normalize(record2.cust_short_dim_name))
        >= SHARED_WORDS_MIN
    ):
        reasons.append("Customer names share words")
    return reasons


class Linker:
    """Moteur de rapprochement entre opportunités externes et enregistrements internes."""

    def __init__(self, config: MatchingConfig | None = None) -> None:
        self.config = config or MatchingConfig()
        self.auto_threshold = self.config.auto_threshold
        self.suggest_threshold = self.config.suggest_threshold
        self.max_suggestions = self.config.max_suggestions
        self.external_weights = self.config.external_weights
        self.internal_weights = self.config.internal_weights

    def _score_pair(self, external: ExternalRecord, internal: InternalRecord) -> MatchCandidate | None:
        """
        Score d'une paire.

        Returns:
            Le candidat, ou None si le scoring a échoué (erreur journalisée,
            score 0) ou si aucun champ n'est renseigné des deux côtés.
        """
        try:
            score, details = score_external_internal_details(external, internal, self.external_weights)
        except Exception:
            logger.warning(
                "Erreur de scoring pour la paire externe=%r interne=%r, score=0",
                getattr(external, "key", external),
                getattr(internal, "key", internal),
                exc_info=True,
            )
            return None
        if not any(fs.left and fs.right for fs in details):
            return None
        return MatchCandidate(external, internal, score, {fs.field: fs.score for fs in details})

    def find_best_matches(
        self,
        externals: Sequence[ExternalRecord],
        internals: Sequence[InternalRecord],
        threshold: float | None = None,
    ) -> list[MatchResult]:
        """
        Associe chaque enregistrement externe à son meilleur interne encore libre.

        Glouton, dans l'ordre des externes : un interne retenu n'est plus
        proposé aux externes suivants. Égalité de score → premier rencontré.

        Returns:
            Liste de MatchResult (match_type auto), dans l'ordre des externes.

        Raises:
            MatchInputError: Si une collection est absente.
        """
        _require_collection(externals, "externals")
        _require_collection(internals, "internals")
        threshold = self.auto_threshold if threshold is None else float(threshold)
        externals = list(externals)
        internals = list(internals)

        logger.info(
            "Recherche des meilleures correspondances: %d externes × %d internes, seuil %.1f%%",
            len(externals),
            len(internals),
            threshold,
        )

        # Internes déjà attribués : par position, et par clé quand elle existe.
        used: set[int] = set()
        used_keys: set[str] = set()
        results: list[MatchResult] = []

        for external in externals:
            candidates: list[tuple[int, MatchCandidate]] = []
            for idx, internal in enumerate(internals):
                key = getattr(internal, "key", "")
                if idx in used or (key and key in used_keys):
                    continue
                cand = self._score_pair(external, internal)
                if cand is not None and cand.score >= threshold:
                    candidates.append((idx, cand))

            if not candidates:
                continue

            best_idx, best = candidates[0]
            for idx, cand in candidates[1:]:
                if cand.score > best.score:
                    best_idx, best = idx, cand

            results.append(
                MatchResult(
                    external=external,
                    internal=best.internal,
                    score=best.score,
                    confidence=classify(best.score),
                    match_type=MatchType.AUTO,
                    matched_by=ENGINE_NAME,
                    details=dict(best.details),
                    metadata={
                        "threshold": threshold,
                        "algorithm": ALGORITHM,
                        "candidates_considered": len(candidates),
                    },
                )
            )
            used.add(best_idx)
            if best.internal.key:
                used_keys.add(best.internal.key)

            logger.debug(
                "Auto-match: %s → %s (%.0f%%)",
                external.opportunity_name or external.key,
                best.internal.cust_short_dim_name,
                best.score,
            )

        logger.info("%d correspondances automatiques au-dessus de %.1f%%", len(results), threshold)
        return results

    def suggest(
        self,
        source: InternalRecord,
        candidates: Sequence[InternalRecord],
        *,
        min_similarity: float | None = None,
        max_suggestions: int | None = None,
    ) -> list[Suggestion]:
        """
        Suggestions interne ↔ interne pour un enregistrement source.

        La source elle-même (même row_key) est ignorée. Tri par score
        décroissant, tronqué à max_suggestions.
        """
        if source is None:
            raise MatchInputError("source est requis (got None)")
        _require_collection(candidates, "candidates")
        min_similarity = self.suggest_threshold if min_similarity is None else float(min_similarity)
        max_suggestions = self.max_suggestions if max_suggestions is None else int(max_suggestions)

        suggestions: list[Suggestion] = []
        for target in candidates:
            if target is source or (source.key and getattr(target, "key", None) == source.key):
                continue
            try:
                score, details = score_internal_internal_details(source, target, self.internal_weights)
            except Exception:
                logger.warning(
                    "Erreur de scoring pour la suggestion %r ↔ %r, ignorée",
                    source.key,
                    getattr(target, "key", target),
                    exc_info=True,
                )
                continue
            if not any(fs.left and fs.right for fs in details):
                continue
            if score >= min_similarity:
                suggestions.append(
                    Suggestion(
                        target=target,
                        score=score,
                        confidence=classify(score),
                        reasons=match_reasons(source, target),
                    )
                )

        suggestions.sort(key=lambda s: s.score, reverse=True)
        return suggestions[:max_suggestions]

    def manual_match(
        self,
        external: ExternalRecord,
        internal: InternalRecord,
        *,
        created_by: str = "",
    ) -> MatchResult:
        """Correspondance choisie par un utilisateur : scorée mais sans seuil."""
        if external is None or internal is None:
            raise MatchInputError("external et internal sont requis")
        score, details = score_external_internal_details(external, internal, self.external_weights)
        return MatchResult(
            external=external,
            internal=internal,
            score=score,
            confidence=classify(score),
            match_type=MatchType.MANUAL,
            matched_by=created_by,
            details={fs.field: fs.score for fs in details},
            metadata={"algorithm": ALGORITHM},
        )


def find_best_matches(
    externals: Sequence[ExternalRecord],
    internals: Sequence[InternalRecord],
    threshold: float = 80.0,
) -> list[MatchResult]:
    """Raccourci : Linker avec la configuration par défaut."""
    return Linker().find_best_matches(externals, internals, threshold)
