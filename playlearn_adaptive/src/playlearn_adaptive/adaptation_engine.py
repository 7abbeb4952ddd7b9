"""
Adaptive Learning Engine

Silently adjusts content difficulty for one play session based on the
learner's answers and response times.

Rules (per age group profile):
- N incorrect in a row -> simplify (one rank down)
- M correct in a row -> increase complexity (one rank up)
- Frustration at its limit -> emergency simplification (straight to the floor)

The engine only computes state. The content layer reads recommendations after
each interaction and decides what to render, play or persist.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from playlearn_adaptive.age_profiles import AgeGroupProfile, EMERGENCY_HINTS, get_profile
from playlearn_adaptive.behavior_patterns import detect_patterns
from playlearn_adaptive.difficulty import DifficultyLevel
from playlearn_adaptive.errors import EngineNotInitialized, InvalidInteractionRecord
from playlearn_adaptive.session_state import BehavioralFlags, InteractionRecord, SessionState

logger = logging.getLogger(__name__)


@dataclass
class Recommendations:
    """What the content layer should do next."""
    difficulty: DifficultyLevel
    adaptation_hints: List[str]
    suggest_break: bool
    encouragement_level: str  # "minimal", "normal" or "high"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "difficulty": self.difficulty.tag,
            "adaptation_hints": list(self.adaptation_hints),
            "suggest_break": self.suggest_break,
            "encouragement_level": self.encouragement_level,
        }


@dataclass
class SessionSnapshot:
    """Privacy-safe session summary handed to persistence (no per-interaction data)."""
    age_group: Optional[str]
    duration_ms: int
    interaction_count: int
    success_rate: float
    final_difficulty: DifficultyLevel
    engagement_score: int
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "age_group": self.age_group,
            "duration_ms": self.duration_ms,
            "interaction_count": self.interaction_count,
            "success_rate": self.success_rate,
            "final_difficulty": self.final_difficulty.tag,
            "engagement_score": self.engagement_score,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionSnapshot":
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            age_group=data.get("age_group"),
            duration_ms=int(data.get("duration_ms", 0)),
            interaction_count=int(data.get("interaction_count", 0)),
            success_rate=float(data.get("success_rate", 0.0)),
            final_difficulty=DifficultyLevel.parse(data["final_difficulty"]),
            engagement_score=int(data.get("engagement_score", 0)),
            timestamp=timestamp,
        )


@dataclass
class SessionAnalytics:
    """Live session overview for the parent view."""
    duration_ms: int
    total_attempts: int
    success_rate: float
    current_difficulty: DifficultyLevel
    engagement_score: int
    topics_explored: List[str] = field(default_factory=list)
    behavioral_insights: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duration_ms": self.duration_ms,
            "total_attempts": self.total_attempts,
            "success_rate": self.success_rate,
            "current_difficulty": self.current_difficulty.tag,
            "engagement_score": self.engagement_score,
            "topics_explored": list(self.topics_explored),
            "behavioral_insights": dict(self.behavioral_insights),
        }


class AdaptationEngine:
    """
    Per-session adaptive difficulty state machine.

    One instance serves one learner session. It is not thread-safe: callers
    hosting several concurrent tasks must serialize record_interaction()
    per session (see SessionManager).
    """

    # Frustration
    EMERGENCY_FRUSTRATION = 3
    BREAK_FRUSTRATION = 2
    FRUSTRATION_CEILING = 5

    # Engagement score weights
    ENGAGEMENT_BASE = 100
    FRUSTRATION_PENALTY = 10
    LOW_SUCCESS_RATE = 0.5
    LOW_SUCCESS_PENALTY = 20
    FATIGUE_PENALTY = 15
    MASTERY_BONUS = 10
    CONSISTENCY_MIN_ATTEMPTS = 10
    CONSISTENCY_SUCCESS_RATE = 0.6
    CONSISTENCY_BONUS = 15

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize an unbound engine.

        Args:
            clock: Returns the current time (defaults to UTC now)
        """
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.age_group: Optional[str] = None
        self.profile: Optional[AgeGroupProfile] = None
        self.state = SessionState(started_at=self._clock())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, age_group: str) -> None:
        """
        Bind the engine to an age group profile.

        Args:
            age_group: "3-5", "6-9" or "10-12"

        Raises:
            InvalidAgeGroup: If the tag matches no profile (engine is left unchanged)
        """
        profile = get_profile(age_group)
        self.age_group = age_group
        self.profile = profile
        self.state.current_difficulty = DifficultyLevel.starting()
        logger.info(f"🧠 [AdaptationEngine] Initialized for age group {age_group}")

    def reset_session(self) -> None:
        """Start a fresh session, keeping the bound age group."""
        self.state = SessionState(started_at=self._clock())
        logger.info(f"🔄 [AdaptationEngine] Session reset (age group {self.age_group})")

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_interaction(
        self,
        record: Union[InteractionRecord, Mapping[str, Any]]
    ) -> Recommendations:
        """
        Record one learner interaction and adapt.

        Args:
            record: An InteractionRecord, or a mapping with "correct",
                "time_spent_ms" (or "timeSpent") and "kind" (or "type")

        Returns:
            Recommendations after the update

        Raises:
            InvalidInteractionRecord: If the record is malformed (no state change)
            EngineNotInitialized: If no age group is bound
        """
        record = self._coerce_record(record)
        if self.profile is None:
            raise EngineNotInitialized("initialize(age_group) must be called before recording interactions")

        state = self.state

        state.interactions.append(record)
        state.total_attempts += 1

        if record.correct:
            state.consecutive_correct += 1
            state.consecutive_incorrect = 0
        else:
            state.consecutive_incorrect += 1
            state.consecutive_correct = 0

        state.success_rate = state.correct_count / state.total_attempts

        self._update_behavior()
        self._evaluate_adaptation()
        state.engagement_score = self._engagement_score()

        logger.debug(
            f"📊 [AdaptationEngine] Interaction recorded: correct={record.correct} "
            f"streak=+{state.consecutive_correct}/-{state.consecutive_incorrect} "
            f"success={state.success_rate:.1%} difficulty={state.current_difficulty.tag}"
        )

        return self.get_recommendations()

    def _coerce_record(self, record: Union[InteractionRecord, Mapping[str, Any]]) -> InteractionRecord:
        """Validate input and build an InteractionRecord without touching state."""
        if isinstance(record, InteractionRecord):
            correct = record.correct
            time_spent = record.time_spent_ms
        elif isinstance(record, Mapping):
            correct = record.get("correct")
            time_spent = record.get("time_spent_ms", record.get("timeSpent", 0))
        else:
            raise InvalidInteractionRecord(f"Unsupported interaction type: {type(record).__name__}")

        if not isinstance(correct, bool):
            raise InvalidInteractionRecord("Interaction must have a boolean 'correct' field")
        if isinstance(time_spent, bool) or not isinstance(time_spent, (int, float)) or not math.isfinite(time_spent):
            raise InvalidInteractionRecord(f"time_spent_ms must be a number, got {time_spent!r}")
        if time_spent < 0:
            raise InvalidInteractionRecord(f"time_spent_ms must be >= 0, got {time_spent}")

        if isinstance(record, InteractionRecord):
            if isinstance(time_spent, int):
                return record
            return InteractionRecord(
                correct=record.correct,
                time_spent_ms=int(time_spent),
                kind=record.kind,
                occurred_at=record.occurred_at,
                difficulty_at_time=record.difficulty_at_time,
            )

        return InteractionRecord(
            correct=correct,
            time_spent_ms=int(time_spent),
            kind=str(record.get("kind", record.get("type", "general"))),
            occurred_at=self._clock(),
            difficulty_at_time=self.state.current_difficulty,
        )

    def _update_behavior(self) -> None:
        state = self.state
        was_fatigued = state.behavior.fatigued.detected
        state.behavior = detect_patterns(
            state.interactions,
            state.consecutive_correct,
            state.success_rate,
        )

        # Count fatigue once per episode, not on every call it stays detected
        if state.behavior.fatigued.detected and not was_fatigued:
            state.frustration_level = min(self.FRUSTRATION_CEILING, state.frustration_level + 1)
            logger.info(
                f"😴 [AdaptationEngine] Fatigue detected (frustration={state.frustration_level})"
            )

    def _evaluate_adaptation(self) -> None:
        """Apply at most one difficulty change, highest priority first."""
        state = self.state
        profile = self.profile
        state.last_adaptation_event = None

        if state.frustration_level >= self.EMERGENCY_FRUSTRATION:
            self._emergency_simplification()
        elif state.consecutive_incorrect >= profile.incorrect_threshold:
            self._simplify_experience()
        elif state.consecutive_correct >= profile.correct_threshold:
            self._increase_complexity()

    def _simplify_experience(self) -> None:
        state = self.state
        old_difficulty = state.current_difficulty
        state.current_difficulty = old_difficulty.lowered()
        state.consecutive_incorrect = 0
        state.frustration_level = max(0, state.frustration_level - 1)
        state.current_adaptations = self.profile.simplification_hints()
        state.last_adaptation_event = "simplify"
        logger.info(
            f"🔽 [AdaptationEngine] Simplifying: {old_difficulty.tag} → {state.current_difficulty.tag}"
        )

    def _increase_complexity(self) -> None:
        state = self.state
        old_difficulty = state.current_difficulty
        state.current_difficulty = old_difficulty.raised()
        state.consecutive_correct = 0
        state.current_adaptations = self.profile.complexity_hints()
        state.last_adaptation_event = "increase"
        logger.info(
            f"🔼 [AdaptationEngine] Increasing complexity: {old_difficulty.tag} → {state.current_difficulty.tag}"
        )

    def _emergency_simplification(self) -> None:
        state = self.state
        state.current_difficulty = DifficultyLevel.lowest()
        state.frustration_level = 0
        state.consecutive_incorrect = 0
        state.current_adaptations = list(EMERGENCY_HINTS)
        state.last_adaptation_event = "emergency"
        logger.warning("🚨 [AdaptationEngine] Emergency simplification - learner may be frustrated")

    def _engagement_score(self) -> int:
        state = self.state
        behavior = state.behavior
        score = self.ENGAGEMENT_BASE

        score -= state.frustration_level * self.FRUSTRATION_PENALTY
        if state.success_rate < self.LOW_SUCCESS_RATE:
            score -= self.LOW_SUCCESS_PENALTY
        if behavior.fatigued.detected:
            score -= self.FATIGUE_PENALTY
        if behavior.mastered.detected:
            score += self.MASTERY_BONUS
        if (state.total_attempts > self.CONSISTENCY_MIN_ATTEMPTS
                and state.success_rate > self.CONSISTENCY_SUCCESS_RATE):
            score += self.CONSISTENCY_BONUS

        return max(0, min(100, score))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def behavior(self) -> BehavioralFlags:
        return self.state.behavior

    def get_current_adaptations(self) -> List[str]:
        return list(self.state.current_adaptations)

    def get_difficulty_level(self) -> DifficultyLevel:
        return self.state.current_difficulty

    def get_recommendations(self) -> Recommendations:
        """Recommendations for the next piece of content."""
        state = self.state
        behavior = state.behavior

        suggest_break = behavior.fatigued.detected or state.frustration_level >= self.BREAK_FRUSTRATION

        # Mastered learners get less praise to avoid sounding patronizing
        if behavior.mastered.detected:
            encouragement = "minimal"
        elif state.success_rate < self.LOW_SUCCESS_RATE or state.consecutive_incorrect > 0:
            encouragement = "high"
        else:
            encouragement = "normal"

        return Recommendations(
            difficulty=state.current_difficulty,
            adaptation_hints=list(state.current_adaptations),
            suggest_break=suggest_break,
            encouragement_level=encouragement,
        )

    def _duration_ms(self) -> int:
        elapsed = self._clock() - self.state.started_at
        return max(0, int(elapsed.total_seconds() * 1000))

    def get_session_analytics(self) -> SessionAnalytics:
        state = self.state
        topics: List[str] = []
        for interaction in state.interactions:
            if interaction.kind not in topics:
                topics.append(interaction.kind)

        return SessionAnalytics(
            duration_ms=self._duration_ms(),
            total_attempts=state.total_attempts,
            success_rate=state.success_rate,
            current_difficulty=state.current_difficulty,
            engagement_score=state.engagement_score,
            topics_explored=topics,
            behavioral_insights=state.behavior.insights(),
        )

    def export_session_data(self) -> SessionSnapshot:
        """Export a privacy-safe session summary (no per-interaction data)."""
        state = self.state
        return SessionSnapshot(
            age_group=self.age_group,
            duration_ms=self._duration_ms(),
            interaction_count=len(state.interactions),
            success_rate=state.success_rate,
            final_difficulty=state.current_difficulty,
            engagement_score=state.engagement_score,
            timestamp=self._clock(),
        )
