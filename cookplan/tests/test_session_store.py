"""
Tests for cooking session persistence.
"""
from datetime import datetime, timedelta

import pytest

from cookplan.db.models import CookingSessionRecord
from cookplan.errors import SessionNotFoundError
from cookplan.models.schemas import CookingBatch, CookingSession, SessionStatus
from cookplan.services.session_store import SessionStore


@pytest.fixture
def store(db_session):
    return SessionStore(db_session)


class TestSaveAndLoad:

    def test_round_trip_keeps_the_aggregate(self, store, building_session):
        building_session.batches = [CookingBatch(order=1, item_ids=["chicken"], user_notes="crispy")]
        building_session.items[0].batch_id = building_session.batches[0].id

        store.save(building_session)
        loaded = store.get(building_session.id)

        assert loaded.model_dump() == building_session.model_dump()

    def test_save_updates_existing_record(self, store, db_session, building_session):
        store.save(building_session)
        building_session.status = SessionStatus.CANCELLED

        store.save(building_session)

        assert db_session.query(CookingSessionRecord).count() == 1
        record = db_session.get(CookingSessionRecord, building_session.id)
        assert record.status == SessionStatus.CANCELLED
        assert store.get(building_session.id).status == SessionStatus.CANCELLED

    def test_missing_session_raises(self, store):
        with pytest.raises(SessionNotFoundError):
            store.get("missing")


class TestListAndDelete:

    def test_recent_sessions_newest_first(self, store):
        now = datetime(2026, 1, 10, 18, 0)
        for days_ago in (3, 1, 2):
            store.save(CookingSession(id=f"s{days_ago}", created_at=now - timedelta(days=days_ago)))

        recent = store.list_recent()

        assert [s.id for s in recent] == ["s1", "s2", "s3"]

    def test_limit(self, store):
        for index in range(5):
            store.save(CookingSession(id=f"s{index}"))

        assert len(store.list_recent(limit=2)) == 2

    def test_delete(self, store, building_session):
        store.save(building_session)

        assert store.delete(building_session.id)
        assert not store.delete(building_session.id)
        assert store.list_recent() == []
