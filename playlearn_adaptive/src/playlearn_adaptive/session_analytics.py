"""
Session Analytics

Aggregates exported session snapshots into learning insights and
recommendations for the parent dashboard.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from playlearn_adaptive.adaptation_engine import SessionSnapshot


# Parent recommendation thresholds
MIN_HEALTHY_STREAK_DAYS = 3
LOW_SUCCESS_RATE = 0.5
SHORT_SESSION_MS = 10 * 60 * 1000


@dataclass
class SessionInsights:
    """Aggregated numbers over a set of sessions."""
    total_sessions: int = 0
    total_play_time_ms: int = 0
    average_session_duration_ms: int = 0
    total_interactions: int = 0
    average_success_rate: float = 0.0
    average_engagement: float = 0.0
    difficulty_distribution: Dict[str, int] = field(default_factory=dict)
    preferred_play_time: Dict[str, int] = field(default_factory=dict)
    daily_activity: Dict[str, int] = field(default_factory=dict)
    learning_streak: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_sessions": self.total_sessions,
            "total_play_time_ms": self.total_play_time_ms,
            "average_session_duration_ms": self.average_session_duration_ms,
            "total_interactions": self.total_interactions,
            "average_success_rate": self.average_success_rate,
            "average_engagement": self.average_engagement,
            "difficulty_distribution": dict(self.difficulty_distribution),
            "preferred_play_time": dict(self.preferred_play_time),
            "daily_activity": dict(self.daily_activity),
            "learning_streak": self.learning_streak,
        }


@dataclass
class ParentRecommendation:
    title: str
    message: str
    priority: str  # "high", "medium" or "low"

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "message": self.message, "priority": self.priority}


def time_slot(hour: int) -> str:
    """Map an hour of day to a coarse play-time slot."""
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def calculate_streak(active_days: Iterable[date], today: date) -> int:
    """
    Count consecutive active days ending today.

    Args:
        active_days: Days with at least one session
        today: Reference day

    Returns:
        Streak length in days (0 if there was no session today)
    """
    days = set(active_days)
    streak = 0
    current = today
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def summarize_sessions(
    snapshots: Iterable[SessionSnapshot],
    now: Optional[datetime] = None
) -> SessionInsights:
    """
    Aggregate session snapshots.

    The average success rate is total correct answers over total answers
    across all sessions (correct counts are recovered from each snapshot).

    Args:
        snapshots: Exported session snapshots
        now: Reference time for the learning streak (defaults to UTC now)

    Returns:
        SessionInsights (all zeros for no sessions)
    """
    snapshots = list(snapshots)
    insights = SessionInsights()
    if not snapshots:
        return insights

    now = now or datetime.now(timezone.utc)

    difficulty_counts: Counter = Counter()
    slot_counts: Counter = Counter()
    daily_counts: Counter = Counter()
    total_correct = 0
    total_engagement = 0

    for snapshot in snapshots:
        insights.total_play_time_ms += snapshot.duration_ms
        insights.total_interactions += snapshot.interaction_count
        total_correct += round(snapshot.success_rate * snapshot.interaction_count)
        total_engagement += snapshot.engagement_score
        difficulty_counts[snapshot.final_difficulty.tag] += 1
        slot_counts[time_slot(snapshot.timestamp.hour)] += 1
        daily_counts[snapshot.timestamp.date().isoformat()] += 1

    insights.total_sessions = len(snapshots)
    insights.average_session_duration_ms = round(insights.total_play_time_ms / insights.total_sessions)
    if insights.total_interactions:
        insights.average_success_rate = total_correct / insights.total_interactions
    insights.average_engagement = total_engagement / insights.total_sessions
    insights.difficulty_distribution = dict(difficulty_counts)
    insights.preferred_play_time = dict(slot_counts)
    insights.daily_activity = dict(sorted(daily_counts.items()))
    insights.learning_streak = calculate_streak(
        (date.fromisoformat(day) for day in daily_counts),
        now.date(),
    )
    return insights


def parent_recommendations(insights: SessionInsights) -> List[ParentRecommendation]:
    """Suggest next steps for parents, most important first."""
    recommendations = []

    if insights.learning_streak < MIN_HEALTHY_STREAK_DAYS:
        recommendations.append(ParentRecommendation(
            title="Build Consistency",
            message="Encourage daily play sessions to build a learning habit",
            priority="high",
        ))

    if insights.total_interactions and insights.average_success_rate < LOW_SUCCESS_RATE:
        recommendations.append(ParentRecommendation(
            title="Practice Together",
            message="Play a few rounds together and talk through the tricky ones",
            priority="medium",
        ))

    if insights.total_sessions and insights.average_session_duration_ms < SHORT_SESSION_MS:
        recommendations.append(ParentRecommendation(
            title="Extend Play Time",
            message="Longer sessions lead to better learning outcomes",
            priority="low",
        ))

    return recommendations
