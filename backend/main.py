"""
FastAPI Backend for PlayLearn Adaptive Sessions

Hosts one adaptive difficulty engine per play session:
- JWT Authentication
- Per-session serialized interaction recording
- Recommendations for the content layer after every answer
- Session snapshots persisted to Supabase
- Aggregated insights for parents
"""

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional, List, Dict, Any
import os
import sys
import signal

from lib.logger import setup_logging, get_logger
from lib.supabase_client import get_optional_supabase_client
from lib.auth import get_current_user, require_parent_of

from playlearn_adaptive.errors import (
    EngineNotInitialized,
    InvalidAgeGroup,
    InvalidInteractionRecord,
    UnknownSession,
)
from playlearn_adaptive.session_analytics import parent_recommendations, summarize_sessions
from playlearn_adaptive.session_manager import SessionManager

setup_logging(use_colors=True)

logger = get_logger("backend.main")
session_logger = get_logger("backend.sessions")

# Singleton SessionManager so live sessions survive across requests
_session_manager: Optional[SessionManager] = None


def get_session_manager() -> SessionManager:
    """Get or create the SessionManager singleton."""
    global _session_manager
    if _session_manager is None:
        table = os.getenv("SNAPSHOT_TABLE", SessionManager.DEFAULT_TABLE)
        _session_manager = SessionManager(supabase_client=get_optional_supabase_client(), table=table)
    return _session_manager


app = FastAPI(
    title="PlayLearn Adaptive API",
    description="Adaptive difficulty sessions for children's learning games",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==================== Pydantic Models ====================

class StartSessionRequest(BaseModel):
    age_group: str


class StartSessionResponse(BaseModel):
    session_id: str
    age_group: str
    difficulty: str


class InteractionRequest(BaseModel):
    correct: Optional[bool] = None
    time_spent_ms: int = 0
    kind: str = "general"


class RecommendationsResponse(BaseModel):
    difficulty: str
    adaptation_hints: List[str]
    suggest_break: bool
    encouragement_level: str


class SessionAnalyticsResponse(BaseModel):
    duration_ms: int
    total_attempts: int
    success_rate: float
    current_difficulty: str
    engagement_score: int
    topics_explored: List[str]
    behavioral_insights: Dict[str, bool]


class SnapshotResponse(BaseModel):
    age_group: Optional[str]
    duration_ms: int
    interaction_count: int
    success_rate: float
    final_difficulty: str
    engagement_score: int
    timestamp: str


class InsightsResponse(BaseModel):
    insights: Dict[str, Any]
    recommendations: List[Dict[str, str]]


# ==================== Error Handling ====================

@app.exception_handler(InvalidAgeGroup)
async def invalid_age_group_handler(request: Request, exc: InvalidAgeGroup):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(InvalidInteractionRecord)
async def invalid_interaction_handler(request: Request, exc: InvalidInteractionRecord):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(EngineNotInitialized)
async def engine_not_initialized_handler(request: Request, exc: EngineNotInitialized):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(UnknownSession)
async def unknown_session_handler(request: Request, exc: UnknownSession):
    return JSONResponse(status_code=404, content={"detail": "Session not found"})


# ==================== Helper Functions ====================

def check_session_owner(manager: SessionManager, session_id: str, user: dict):
    """Only the learner who started a session may drive it."""
    owner = manager.get_owner(session_id)
    if owner is not None and owner != user["id"]:
        # Same answer as a missing session: don't reveal other learners' ids
        raise HTTPException(status_code=404, detail="Session not found")


# ==================== API Endpoints ====================

@app.get("/")
async def root():
    """Health check endpoint."""
    manager = get_session_manager()
    return {
        "status": "ok",
        "service": "playlearn-adaptive",
        "persistence": "supabase" if manager.use_supabase else "in-memory",
    }


@app.post("/api/sessions", response_model=StartSessionResponse)
async def start_session(
    body: StartSessionRequest,
    user: dict = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager)
):
    """Start an adaptive session for the current learner."""
    session_id = manager.start_session(body.age_group, user_id=user["id"])
    engine = manager.get_engine(session_id)
    session_logger.info("Session started", data={
        "session_id": session_id[:8] + "...",
        "age_group": body.age_group,
    })
    return StartSessionResponse(
        session_id=session_id,
        age_group=body.age_group,
        difficulty=engine.get_difficulty_level().tag,
    )


@app.post("/api/sessions/{session_id}/interactions", response_model=RecommendationsResponse)
async def record_interaction(
    session_id: str,
    body: InteractionRequest,
    user: dict = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager)
):
    """Record one answer and return what to show next."""
    check_session_owner(manager, session_id, user)
    recommendations = await manager.record_interaction(session_id, {
        "correct": body.correct,
        "time_spent_ms": body.time_spent_ms,
        "kind": body.kind,
    })
    return RecommendationsResponse(**recommendations.to_dict())


@app.get("/api/sessions/{session_id}/recommendations", response_model=RecommendationsResponse)
async def get_recommendations(
    session_id: str,
    user: dict = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager)
):
    """Current recommendations without recording anything."""
    check_session_owner(manager, session_id, user)
    return RecommendationsResponse(**manager.get_recommendations(session_id).to_dict())


@app.get("/api/sessions/{session_id}/analytics", response_model=SessionAnalyticsResponse)
async def get_session_analytics(
    session_id: str,
    user: dict = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager)
):
    """Live overview of a running session."""
    check_session_owner(manager, session_id, user)
    return SessionAnalyticsResponse(**manager.get_session_analytics(session_id).to_dict())


@app.post("/api/sessions/{session_id}/reset", response_model=RecommendationsResponse)
async def reset_session(
    session_id: str,
    user: dict = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager)
):
    """Restart the session from scratch (same age group)."""
    check_session_owner(manager, session_id, user)
    await manager.reset_session(session_id)
    return RecommendationsResponse(**manager.get_recommendations(session_id).to_dict())


@app.post("/api/sessions/{session_id}/end", response_model=SnapshotResponse)
async def end_session(
    session_id: str,
    user: dict = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager)
):
    """End the session and persist its snapshot."""
    check_session_owner(manager, session_id, user)
    snapshot = await manager.end_session(session_id)
    session_logger.success("Session ended", data=snapshot.to_dict())
    return SnapshotResponse(**snapshot.to_dict())


@app.get("/api/insights", response_model=InsightsResponse)
async def get_insights(
    child_id: str,
    days: int = 30,
    user: dict = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager)
):
    """Aggregated learning insights for a parent."""
    require_parent_of(user, child_id)
    snapshots = await manager.list_snapshots(user_id=child_id, days=days)
    insights = summarize_sessions(snapshots)
    return InsightsResponse(
        insights=insights.to_dict(),
        recommendations=[r.to_dict() for r in parent_recommendations(insights)],
    )


@app.on_event("startup")
async def startup_event():
    """Startup event - create the session manager."""
    manager = get_session_manager()
    logger.section("SERVER STARTUP", {
        "persistence": "supabase" if manager.use_supabase else "in-memory",
        "snapshot_table": manager.table,
    })


if __name__ == "__main__":
    import uvicorn

    def handle_exit(*args):
        """Handle graceful shutdown."""
        logger.section("SERVER SHUTDOWN", {"reason": "signal received"})
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_exit)
    signal.signal(signal.SIGTERM, handle_exit)

    try:
        uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
    except KeyboardInterrupt:
        logger.info("🛑 Server stopped.")
        sys.exit(0)
