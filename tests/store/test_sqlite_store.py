from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from funding_harvester.engine.fingerprint import fingerprint_of
from funding_harvester.errors import DuplicateFingerprint, StoreError
from funding_harvester.models import CanonicalOpportunity
from funding_harvester.store import SQLiteOpportunityStore

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _record(name: str, *, site: str = "finep", deadline: str | None = None, created=T0, **extra):
    opportunity = CanonicalOpportunity(
        site=site,
        name=name,
        url=f"https://{site}.org/{name.replace(' ', '-').lower()}",
        deadline=deadline,
        created_at=created,
        last_seen_at=created,
        **extra,
    )
    opportunity.fingerprint = fingerprint_of(opportunity)
    return opportunity


def test_insert_find_and_touch(store) -> None:
    record = _record("Chamada Alpha", deadline="2025-05-01", description="Apoio")
    record_id = store.insert(record)

    assert store.find_id_by_fingerprint(record.fingerprint) == record_id
    assert store.find_id_by_fingerprint("0" * 64) is None

    later = T0 + timedelta(days=2)
    store.touch(record_id, later)
    [stored] = store.search()
    assert stored.last_seen_at == later
    assert stored.created_at == T0
    assert stored.description == "Apoio"
    assert stored.fingerprint == record.fingerprint


def test_duplicate_fingerprint_is_reported(store) -> None:
    record = _record("Chamada Beta")
    store.insert(record)
    with pytest.raises(DuplicateFingerprint) as excinfo:
        store.insert(_record("Chamada Beta"))
    assert excinfo.value.fingerprint == record.fingerprint
    assert isinstance(excinfo.value, StoreError)


def test_touch_unknown_id_raises_store_error(store) -> None:
    with pytest.raises(StoreError):
        store.touch(999, T0)


def test_search_orders_by_deadline_then_newest(store) -> None:
    store.insert(_record("Sem prazo antigo", created=T0))
    store.insert(_record("Sem prazo novo", created=T0 + timedelta(hours=1)))
    store.insert(_record("Prazo tardio", deadline="2026-01-01"))
    store.insert(_record("Prazo cedo", deadline="2025-02-01", site="fapemig", category="Saúde"))

    names = [row.name for row in store.search()]
    assert names == ["Prazo cedo", "Prazo tardio", "Sem prazo novo", "Sem prazo antigo"]

    assert [row.name for row in store.search(site="fapemig")] == ["Prazo cedo"]
    assert [row.name for row in store.search(query="saúde")] == ["Prazo cedo"]
    assert [row.name for row in store.search(query="PRAZO TARDIO")] == ["Prazo tardio"]
    assert len(store.search(limit=2)) == 2


def test_store_creates_parent_directories(tmp_path) -> None:
    path = tmp_path / "nested" / "dir" / "db.sqlite"
    opportunity_store = SQLiteOpportunityStore(path)
    try:
        assert path.exists()
    finally:
        opportunity_store.close()


def test_closed_store_wraps_engine_errors(tmp_path) -> None:
    opportunity_store = SQLiteOpportunityStore(tmp_path / "closed.db")
    opportunity_store.close()
    with pytest.raises(StoreError):
        opportunity_store.find_id_by_fingerprint("abc")
