"""
PlayLearn adaptive difficulty engine.

Per-session difficulty adaptation for children's learning games, plus
session analytics and snapshot persistence.
"""

from playlearn_adaptive.adaptation_engine import (
    AdaptationEngine,
    Recommendations,
    SessionAnalytics,
    SessionSnapshot,
)
from playlearn_adaptive.age_profiles import AGE_GROUP_PROFILES, AgeGroupProfile, get_profile
from playlearn_adaptive.difficulty import DifficultyLevel
from playlearn_adaptive.errors import (
    AdaptationError,
    EngineNotInitialized,
    InvalidAgeGroup,
    InvalidInteractionRecord,
    UnknownSession,
)
from playlearn_adaptive.session_analytics import SessionInsights, parent_recommendations, summarize_sessions
from playlearn_adaptive.session_manager import SessionManager
from playlearn_adaptive.session_state import BehavioralFlags, BehaviorPattern, InteractionRecord, SessionState

__all__ = [
    "AdaptationEngine",
    "Recommendations",
    "SessionAnalytics",
    "SessionSnapshot",
    "AGE_GROUP_PROFILES",
    "AgeGroupProfile",
    "get_profile",
    "DifficultyLevel",
    "AdaptationError",
    "EngineNotInitialized",
    "InvalidAgeGroup",
    "InvalidInteractionRecord",
    "UnknownSession",
    "SessionInsights",
    "parent_recommendations",
    "summarize_sessions",
    "SessionManager",
    "BehavioralFlags",
    "BehaviorPattern",
    "InteractionRecord",
    "SessionState",
]
