"""
Session Manager for Adaptive Play Sessions

Hosts one AdaptationEngine per learner session and persists the
privacy-safe session snapshot to Supabase when a session ends.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from playlearn_adaptive.adaptation_engine import (
    AdaptationEngine,
    Recommendations,
    SessionAnalytics,
    SessionSnapshot,
)
from playlearn_adaptive.errors import UnknownSession
from playlearn_adaptive.session_state import InteractionRecord

logger = logging.getLogger(__name__)


@dataclass
class HostedSession:
    """
    An engine plus the lock around its writes.

    Engine calls are synchronous, so on one event loop they already run one
    at a time. The lock keeps each write a single critical section if an
    awaitable (such as async persistence) is ever added inside it.
    """
    session_id: str
    engine: AdaptationEngine
    user_id: Optional[str] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionManager:
    """
    Manages live adaptive sessions and snapshot persistence.

    Every session gets its own engine, so different learners never share
    state. Writes to one session run one at a time on the event loop.
    Snapshots go to Supabase when a client is configured; otherwise (or
    when a write fails) they are kept in memory.
    """

    DEFAULT_TABLE = "adaptive_sessions"

    def __init__(self, supabase_client=None, table: str = DEFAULT_TABLE):
        """
        Initialize SessionManager.

        Args:
            supabase_client: Supabase client instance (optional)
            table: Table receiving session snapshots
        """
        self.supabase = supabase_client
        self.use_supabase = supabase_client is not None
        self.table = table

        self._sessions: Dict[str, HostedSession] = {}
        # Always initialize in-memory fallback (used in error cases)
        self._in_memory_snapshots: List[Dict[str, Any]] = []

        if not self.use_supabase:
            logger.warning("⚠️ [SessionManager] Supabase not available, using in-memory fallback")

    def _get(self, session_id: str) -> HostedSession:
        hosted = self._sessions.get(session_id)
        if hosted is None:
            raise UnknownSession(session_id)
        return hosted

    def start_session(self, age_group: str, user_id: Optional[str] = None) -> str:
        """
        Create a session bound to an age group.

        Args:
            age_group: "3-5", "6-9" or "10-12"
            user_id: Owner of the session (optional)

        Returns:
            New session id

        Raises:
            InvalidAgeGroup: If the age group is unknown
        """
        engine = AdaptationEngine()
        engine.initialize(age_group)

        session_id = str(uuid.uuid4())
        self._sessions[session_id] = HostedSession(session_id=session_id, engine=engine, user_id=user_id)
        logger.info(f"💾 [SessionManager] Started session {session_id[:8]}... (age group {age_group})")
        return session_id

    def has_session(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get_engine(self, session_id: str) -> AdaptationEngine:
        return self._get(session_id).engine

    def get_owner(self, session_id: str) -> Optional[str]:
        return self._get(session_id).user_id

    async def record_interaction(
        self,
        session_id: str,
        record: Union[InteractionRecord, Mapping[str, Any]]
    ) -> Recommendations:
        """Record an interaction, serialized per session."""
        hosted = self._get(session_id)
        async with hosted.lock:
            return hosted.engine.record_interaction(record)

    def get_recommendations(self, session_id: str) -> Recommendations:
        return self._get(session_id).engine.get_recommendations()

    def get_session_analytics(self, session_id: str) -> SessionAnalytics:
        return self._get(session_id).engine.get_session_analytics()

    async def reset_session(self, session_id: str) -> None:
        hosted = self._get(session_id)
        async with hosted.lock:
            hosted.engine.reset_session()

    async def end_session(self, session_id: str) -> SessionSnapshot:
        """
        Finish a session: export its snapshot, persist it and stop hosting it.

        Args:
            session_id: Session identifier

        Returns:
            The exported SessionSnapshot
        """
        hosted = self._get(session_id)
        async with hosted.lock:
            snapshot = hosted.engine.export_session_data()
            self._sessions.pop(session_id, None)

        await self.save_snapshot(snapshot, user_id=hosted.user_id, session_id=session_id)
        logger.info(
            f"💾 [SessionManager] Ended session {session_id[:8]}... "
            f"({snapshot.interaction_count} interactions, final difficulty {snapshot.final_difficulty.tag})"
        )
        return snapshot

    async def save_snapshot(
        self,
        snapshot: SessionSnapshot,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None
    ) -> bool:
        """
        Save a session snapshot.

        Args:
            snapshot: Snapshot to store
            user_id: Owner of the session (optional)
            session_id: Session identifier (optional)

        Returns:
            True if saved to Supabase (or in memory when Supabase is not
            configured), False if the Supabase write failed
        """
        row = snapshot.to_dict()
        row["user_id"] = user_id
        row["session_id"] = session_id

        if not self.use_supabase:
            self._in_memory_snapshots.append(row)
            return True

        try:
            insert_data = {k: v for k, v in row.items() if v is not None}
            self.supabase.table(self.table).insert(insert_data).execute()
            return True
        except Exception as e:
            logger.error(f"❌ [SessionManager] Error saving session snapshot: {e}")
            # Fallback to in-memory
            self._in_memory_snapshots.append(row)
            return False

    async def list_snapshots(
        self,
        user_id: Optional[str] = None,
        days: int = 30
    ) -> List[SessionSnapshot]:
        """
        Load snapshots from the last N days, newest first.

        Args:
            user_id: Only return this user's sessions (optional)
            days: Look-back window in days

        Returns:
            List of SessionSnapshot objects
        """
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)

        rows: List[Dict[str, Any]] = []
        if self.use_supabase:
            try:
                query = self.supabase.table(self.table).select('*').gte('timestamp', cutoff.isoformat())
                if user_id:
                    query = query.eq('user_id', user_id)
                result = query.order('timestamp', desc=True).execute()
                rows = list(result.data or [])
            except Exception as e:
                logger.error(f"❌ [SessionManager] Error loading session snapshots: {e}")
                rows = []

        # Snapshots that fell back to memory are still part of the history
        rows.extend(
            row for row in self._in_memory_snapshots
            if user_id is None or row.get("user_id") == user_id
        )

        snapshots = []
        for row in rows:
            snapshot = SessionSnapshot.from_dict(row)
            if snapshot.timestamp.tzinfo is None:
                snapshot.timestamp = snapshot.timestamp.replace(tzinfo=timezone.utc)
            if snapshot.timestamp >= cutoff:
                snapshots.append(snapshot)

        snapshots.sort(key=lambda s: s.timestamp, reverse=True)
        return snapshots
