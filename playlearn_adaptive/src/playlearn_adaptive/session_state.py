"""
Session State Data Model

Defines the per-session state the adaptation engine mutates, the immutable
interaction records it consumes, and the behavioural flags it derives.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone

from playlearn_adaptive.difficulty import DifficultyLevel


@dataclass(frozen=True)
class InteractionRecord:
    """One observed learner action."""
    correct: bool
    time_spent_ms: int
    kind: str = "general"  # Free-form activity tag (game id, question type, ...)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    difficulty_at_time: DifficultyLevel = DifficultyLevel.MEDIUM


@dataclass
class BehaviorPattern:
    """A single behavioural detection and the actions recommended for it."""
    detected: bool = False
    actions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"detected": self.detected, "actions": list(self.actions)}


@dataclass
class BehavioralFlags:
    """Rolling-window behaviour detections, recomputed on every interaction."""
    rushing: BehaviorPattern = field(default_factory=BehaviorPattern)
    hesitating: BehaviorPattern = field(default_factory=BehaviorPattern)
    fatigued: BehaviorPattern = field(default_factory=BehaviorPattern)
    mastered: BehaviorPattern = field(default_factory=BehaviorPattern)

    def insights(self) -> Dict[str, bool]:
        return {
            "rushing": self.rushing.detected,
            "hesitating": self.hesitating.detected,
            "fatigued": self.fatigued.detected,
            "mastered": self.mastered.detected,
        }


@dataclass
class SessionState:
    """Mutable state for one play session."""
    current_difficulty: DifficultyLevel = DifficultyLevel.MEDIUM
    interactions: List[InteractionRecord] = field(default_factory=list)
    consecutive_correct: int = 0
    consecutive_incorrect: int = 0
    total_attempts: int = 0
    success_rate: float = 0.0
    frustration_level: int = 0
    engagement_score: int = 100
    current_adaptations: List[str] = field(default_factory=list)
    behavior: BehavioralFlags = field(default_factory=BehavioralFlags)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # Set when the last recorded interaction changed difficulty
    last_adaptation_event: Optional[str] = None

    @property
    def correct_count(self) -> int:
        return sum(1 for interaction in self.interactions if interaction.correct)
