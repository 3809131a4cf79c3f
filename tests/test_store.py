"""Tests du stockage des correspondances."""

from pathlib import Path

import pytest

from datamatch.config import MatchNotFoundError, StatusError
from datamatch.matching.linker import find_best_matches
from datamatch.matching.schema import ExternalRecord, InternalRecord, MatchResult
from datamatch.store import MatchStore


@pytest.fixture
def results() -> list[MatchResult]:
    externals = [
        ExternalRecord(opportunity_id="OPP-1", customer_name="Acme Corp", product_group="Sensors"),
        ExternalRecord(opportunity_id="OPP-2", customer_name="Globex", product_group="Micro"),
    ]
    internals = [
        InternalRecord(row_key="R1", cust_short_dim_name="Acme Corp", cust_app_dim_name="Sensors"),
        InternalRecord(row_key="R2", cust_short_dim_name="Globex", cust_app_dim_name="Micro"),
    ]
    return find_best_matches(externals, internals)


@pytest.fixture
def store(results: list[MatchResult]) -> MatchStore:
    s = MatchStore()
    s.save_all(results)
    return s


def test_save_generates_key_and_pending(results: list[MatchResult]) -> None:
    store = MatchStore()
    record = store.save(results[0])
    assert record.match_id
    assert record.match_id in store
    assert record.status == "Pending"
    assert record.external_id == "OPP-1"
    assert record.internal_id == "R1"
    assert record.match_type == "auto"
    assert record.created_by == "SimilarityEngine"
    assert record.metadata["fields"]["customer_name"] == 100.0
    # Le résultat du moteur n'est pas modifié
    assert results[0].status.value == "Pending"


def test_keys_are_unique(results: list[MatchResult]) -> None:
    store = MatchStore()
    a = store.save(results[0])
    b = store.save(results[0])
    assert a.match_id != b.match_id
    assert len(store) == 2


def test_update_status(store: MatchStore) -> None:
    match_id = store.list()[0].match_id
    record = store.update_status(match_id, "Approved", approved_by="alice", notes="ok")
    assert record.status == "Approved"
    assert record.approved_by == "alice"
    assert record.approved_at is not None
    assert record.notes == "ok"
    assert [r.match_id for r in store.list("Approved")] == [match_id]
    assert len(store.list("Pending")) == 1


def test_update_status_invalid(store: MatchStore) -> None:
    match_id = store.list()[0].match_id
    with pytest.raises(StatusError, match="status invalide"):
        store.update_status(match_id, "Done")
    with pytest.raises(MatchNotFoundError):
        store.update_status("inconnu", "Approved")


def test_unmatch(store: MatchStore) -> None:
    match_id = store.list()[0].match_id
    removed = store.unmatch(match_id)
    assert removed.match_id == match_id
    assert match_id not in store
    with pytest.raises(MatchNotFoundError):
        store.get(match_id)


def test_statistics(store: MatchStore) -> None:
    match_id = store.list()[0].match_id
    store.update_status(match_id, "Rejected")
    stats = store.statistics()
    assert stats["total_matches"] == 2
    assert stats["pending_matches"] == 1
    assert stats["rejected_matches"] == 1
    assert stats["approved_matches"] == 0
    assert stats["average_similarity_score"] == pytest.approx(100.0)
    assert stats["match_type_breakdown"] == {"auto": 2}


def test_statistics_empty() -> None:
    assert MatchStore().statistics()["average_similarity_score"] == 0.0


def test_csv_reload(store: MatchStore, tmp_path: Path) -> None:
    match_id = store.list()[0].match_id
    store.update_status(match_id, "Approved", approved_by="bob")
    path = tmp_path / "matches.csv"
    store.save_csv(path)

    reloaded = MatchStore.load_csv(path)
    assert len(reloaded) == 2
    record = reloaded.get(match_id)
    assert record.status == "Approved"
    assert record.approved_by == "bob"
    assert record.approved_at is not None
    assert record.similarity_score == pytest.approx(100.0)
    assert record.metadata["algorithm"] == "Weighted"
