"""
Unit Tests for the Session Manager

Tests session hosting, per-session serialization and snapshot
persistence (Supabase and in-memory fallback).
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from playlearn_adaptive.adaptation_engine import SessionSnapshot
from playlearn_adaptive.difficulty import DifficultyLevel
from playlearn_adaptive.errors import InvalidAgeGroup, UnknownSession
from playlearn_adaptive.session_manager import SessionManager


class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable stand-in for a Supabase table query."""

    def __init__(self, client, table):
        self.client = client
        self.table_name = table
        self.filters = []
        self.pending_insert = None
        self.descending = False

    def insert(self, data):
        self.pending_insert = data
        return self

    def select(self, columns):
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) >= value)
        return self

    def order(self, column, desc=False):
        self.descending = desc
        return self

    def execute(self):
        if self.client.fail:
            raise ConnectionError("database unavailable")
        rows = self.client.tables.setdefault(self.table_name, [])
        if self.pending_insert is not None:
            rows.append(dict(self.pending_insert))
            return FakeResult([self.pending_insert])
        matched = [row for row in rows if all(f(row) for f in self.filters)]
        matched.sort(key=lambda row: row["timestamp"], reverse=self.descending)
        return FakeResult(matched)


class FakeSupabase:
    def __init__(self, fail=False):
        self.fail = fail
        self.tables = {}

    def table(self, name):
        return FakeQuery(self, name)


def answer(correct, time_spent_ms=4000):
    return {"correct": correct, "time_spent_ms": time_spent_ms, "kind": "puzzle"}


class TestSessionHosting:
    """Test suite for starting and driving sessions."""

    @pytest.fixture
    def manager(self):
        return SessionManager()

    def test_start_session(self, manager):
        session_id = manager.start_session("3-5", user_id="child-1")
        assert manager.has_session(session_id)
        assert manager.get_owner(session_id) == "child-1"
        assert manager.get_engine(session_id).get_difficulty_level() == DifficultyLevel.MEDIUM

    def test_start_session_invalid_age(self, manager):
        with pytest.raises(InvalidAgeGroup):
            manager.start_session("99")

    def test_sessions_are_independent(self, manager):
        first = manager.start_session("6-9")
        second = manager.start_session("6-9")
        assert first != second
        assert manager.get_engine(first) is not manager.get_engine(second)

    def test_unknown_session(self, manager):
        with pytest.raises(UnknownSession):
            manager.get_recommendations("missing")

    @pytest.mark.asyncio
    async def test_record_interaction(self, manager):
        session_id = manager.start_session("6-9")
        await manager.record_interaction(session_id, answer(True))
        recommendations = await manager.record_interaction(session_id, answer(True))
        assert recommendations.difficulty == DifficultyLevel.HARD
        assert manager.get_session_analytics(session_id).total_attempts == 2

    @pytest.mark.asyncio
    async def test_concurrent_interactions_are_serialized(self, manager):
        session_id = manager.start_session("10-12")
        await asyncio.gather(*[
            manager.record_interaction(session_id, answer(i % 3 != 0))
            for i in range(50)
        ])
        state = manager.get_engine(session_id).state
        assert state.total_attempts == 50
        assert len(state.interactions) == 50
        assert state.consecutive_correct == 0 or state.consecutive_incorrect == 0

    @pytest.mark.asyncio
    async def test_reset_session(self, manager):
        session_id = manager.start_session("6-9")
        await manager.record_interaction(session_id, answer(False))
        await manager.reset_session(session_id)
        assert manager.get_session_analytics(session_id).total_attempts == 0
        assert manager.get_engine(session_id).age_group == "6-9"


class TestSnapshotPersistence:
    """Test suite for end_session() and snapshot storage."""

    @pytest.mark.asyncio
    async def test_end_session_in_memory(self):
        manager = SessionManager()
        session_id = manager.start_session("3-5", user_id="child-1")
        await manager.record_interaction(session_id, answer(True))

        snapshot = await manager.end_session(session_id)

        assert snapshot.interaction_count == 1
        assert not manager.has_session(session_id)
        stored = await manager.list_snapshots(user_id="child-1")
        assert stored == [snapshot]

    @pytest.mark.asyncio
    async def test_end_session_supabase(self):
        client = FakeSupabase()
        manager = SessionManager(supabase_client=client, table="snapshots")
        session_id = manager.start_session("10-12", user_id="child-2")
        await manager.record_interaction(session_id, answer(False))

        snapshot = await manager.end_session(session_id)

        rows = client.tables["snapshots"]
        assert len(rows) == 1
        assert rows[0]["user_id"] == "child-2"
        assert rows[0]["session_id"] == session_id
        assert rows[0]["final_difficulty"] == "medium"
        assert "interactions" not in rows[0]
        assert await manager.list_snapshots(user_id="child-2") == [snapshot]
        assert await manager.list_snapshots(user_id="someone-else") == []

    @pytest.mark.asyncio
    async def test_failed_write_falls_back_to_memory(self):
        client = FakeSupabase(fail=True)
        manager = SessionManager(supabase_client=client)
        snapshot = SessionSnapshot(
            age_group="6-9",
            duration_ms=1000,
            interaction_count=3,
            success_rate=2 / 3,
            final_difficulty=DifficultyLevel.EASY,
            engagement_score=80,
            timestamp=datetime.now(timezone.utc),
        )

        saved = await manager.save_snapshot(snapshot, user_id="child-3")

        assert saved is False
        assert await manager.list_snapshots(user_id="child-3") == [snapshot]

    @pytest.mark.asyncio
    async def test_list_snapshots_window_and_order(self):
        manager = SessionManager()
        now = datetime.now(timezone.utc)
        for days_ago in (40, 2, 0):
            await manager.save_snapshot(SessionSnapshot(
                age_group="3-5",
                duration_ms=60_000,
                interaction_count=5,
                success_rate=0.6,
                final_difficulty=DifficultyLevel.MEDIUM,
                engagement_score=90,
                timestamp=now - timedelta(days=days_ago),
            ), user_id="child-4")

        snapshots = await manager.list_snapshots(user_id="child-4", days=30)
        assert len(snapshots) == 2
        assert snapshots[0].timestamp > snapshots[1].timestamp


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
