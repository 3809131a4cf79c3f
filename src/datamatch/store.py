"""Stockage des correspondances : clé unique, statut, validation."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from datamatch.config import MatchNotFoundError, StatusError
from datamatch.matching.schema import MatchResult, MatchStatus
from datamatch.normalize import safe_str

logger = logging.getLogger(__name__)

VALID_STATUSES = frozenset(s.value for s in MatchStatus)


@dataclass
class MatchRecord:
    """Ligne persistée pour une correspondance."""

    match_id: str
    external_id: str
    internal_id: str
    similarity_score: float
    match_type: str
    confidence: str
    status: str = MatchStatus.PENDING.value
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    created_by: str = ""
    approved_at: datetime | None = None
    approved_by: str = ""
    notes: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_result(cls, result: MatchResult, *, created_by: str = "") -> MatchRecord:
        return cls(
            match_id=str(uuid.uuid4()),
            external_id=result.external.opportunity_id,
            internal_id=result.internal.row_key,
            similarity_score=result.score,
            match_type=result.match_type.value,
            confidence=result.confidence.value,
            created_at=result.created_at,
            created_by=created_by or result.matched_by,
            metadata={**result.metadata, "fields": dict(result.details)},
        )


def _check_status(status: str) -> str:
    if status not in VALID_STATUSES:
        raise StatusError(f"status invalide: {status!r}. Valides: {sorted(VALID_STATUSES)}")
    return status


class MatchStore:
    """Stockage en mémoire des correspondances, exportable en CSV."""

    def __init__(self) -> None:
        self._records: dict[str, MatchRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, match_id: object) -> bool:
        return match_id in self._records

    def save(self, result: MatchResult, *, created_by: str = "") -> MatchRecord:
        """Enregistre une correspondance avec une nouvelle clé et le statut Pending."""
        record = MatchRecord.from_result(result, created_by=created_by)
        self._records[record.match_id] = record
        logger.debug("Correspondance enregistrée: %s (%s ↔ %s)", record.match_id, record.external_id, record.internal_id)
        return record

    def save_all(self, results: list[MatchResult], *, created_by: str = "") -> list[MatchRecord]:
        return [self.save(r, created_by=created_by) for r in results]

    def get(self, match_id: str) -> MatchRecord:
        try:
            return self._records[match_id]
        except KeyError:
            raise MatchNotFoundError(f"Correspondance introuvable: {match_id}") from None

    def list(self, status: str | None = None) -> list[MatchRecord]:
        if status is None:
            return list(self._records.values())
        _check_status(status)
        return [r for r in self._records.values() if r.status == status]

    def update_status(
        self,
        match_id: str,
        status: str,
        *,
        approved_by: str = "",
        notes: str = "",
    ) -> MatchRecord:
        """
        Change le statut d'une correspondance (Pending / Approved / Rejected).

        Approved et Rejected horodatent la décision.

        Raises:
            MatchNotFoundError: Si la clé est inconnue.
            StatusError: Si le statut est invalide.
        """
        _check_status(status)
        record = self.get(match_id)
        record.status = status
        if status == MatchStatus.PENDING.value:
            record.approved_at = None
            record.approved_by = ""
        else:
            record.approved_at = datetime.now(timezone.utc)
            record.approved_by = approved_by
        if notes:
            record.notes = notes
        logger.info("Statut de %s → %s", match_id, status)
        return record

    def unmatch(self, match_id: str) -> MatchRecord:
        """Supprime une correspondance et la retourne."""
        record = self.get(match_id)
        del self._records[match_id]
        logger.info("Correspondance supprimée: %s", match_id)
        return record

    def statistics(self) -> dict[str, Any]:
        records = list(self._records.values())
        scores = [r.similarity_score for r in records]
        breakdown: dict[str, int] = {}
        for r in records:
            breakdown[r.match_type] = breakdown.get(r.match_type, 0) + 1
        return {
            "total_matches": len(records),
            "pending_matches": sum(1 for r in records if r.status == MatchStatus.PENDING.value),
            "approved_matches": sum(1 for r in records if r.status == MatchStatus.APPROVED.value),
            "rejected_matches": sum(1 for r in records if r.status == MatchStatus.REJECTED.value),
            "average_similarity_score": sum(scores) / len(scores) if scores else 0.0,
            "match_type_breakdown": breakdown,
        }

    def to_dataframe(self) -> pd.DataFrame:
        columns = [f.name for f in fields(MatchRecord)]
        rows = []
        for r in self._records.values():
            row = asdict(r)
            row["metadata"] = json.dumps(r.metadata, default=str)
            rows.append(row)
        return pd.DataFrame(rows, columns=columns)

    def save_csv(self, path: str | Path) -> None:
        self.to_dataframe().to_csv(path, index=False, encoding="utf-8")

    @classmethod
    def load_csv(cls, path: str | Path) -> MatchStore:
        """Recharge un stockage écrit par save_csv."""
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
        store = cls()
        for row in df.to_dict(orient="records"):
            approved_at = safe_str(row.get("approved_at"))
            record = MatchRecord(
                match_id=row["match_id"],
                external_id=row["external_id"],
                internal_id=row["internal_id"],
                similarity_score=float(row["similarity_score"] or 0),
                match_type=row["match_type"],
                confidence=row["confidence"],
                status=_check_status(row["status"]),
                created_at=pd.Timestamp(row["created_at"]).to_pydatetime(),
                created_by=row.get("created_by", ""),
                approved_at=pd.Timestamp(approved_at).to_pydatetime() if approved_at else None,
                approved_by=row.get("approved_by", ""),
                notes=row.get("notes", ""),
                metadata=json.loads(row["metadata"]) if row.get("metadata") else {},
            )
            store._records[record.match_id] = record
        return store
