"""
Behavioural Pattern Detection

Classifies the learner's recent behaviour (rushing, hesitating, fatigued,
mastered) from a rolling window of interactions.
"""

from typing import List, Sequence

from playlearn_adaptive.session_state import BehaviorPattern, BehavioralFlags, InteractionRecord


WINDOW_SIZE = 10

# Timing thresholds (milliseconds, mean over the window)
RUSHING_MAX_MEAN_MS = 2000
HESITATING_MIN_MEAN_MS = 15000
MIN_TIMING_SAMPLES = 3

# Fatigue: second half of a full window is this much worse than the first half
FATIGUE_MIN_SAMPLES = WINDOW_SIZE
FATIGUE_DROP = 0.3

# Mastery
MASTERY_STREAK = 5
MASTERY_SUCCESS_RATE = 0.8

RUSHING_ACTIONS = ["slowDownPace", "addThinkingPrompts"]
HESITATING_ACTIONS = ["provideHints", "simplifyChoices"]
FATIGUED_ACTIONS = ["suggestBreak", "shortenSession"]
MASTERED_ACTIONS = ["increaseComplexity", "unlockNewContent"]


def recent_window(interactions: Sequence[InteractionRecord]) -> List[InteractionRecord]:
    """Return the most recent (at most WINDOW_SIZE) interactions, oldest first."""
    return list(interactions[-WINDOW_SIZE:])


def _success_fraction(records: Sequence[InteractionRecord]) -> float:
    if not records:
        return 0.0
    return sum(1 for r in records if r.correct) / len(records)


def is_fatigued(window: Sequence[InteractionRecord]) -> bool:
    """
    Check for declining performance across a full window.

    Args:
        window: Recent interactions, oldest first

    Returns:
        True if the newer half succeeds more than FATIGUE_DROP less than the older half
    """
    if len(window) < FATIGUE_MIN_SAMPLES:
        return False

    mid = len(window) // 2
    first_half_success = _success_fraction(window[:mid])
    second_half_success = _success_fraction(window[mid:])
    return second_half_success < first_half_success - FATIGUE_DROP


def detect_patterns(
    interactions: Sequence[InteractionRecord],
    consecutive_correct: int,
    success_rate: float
) -> BehavioralFlags:
    """
    Recompute all behavioural flags from the session log.

    Args:
        interactions: Full session log, oldest first
        consecutive_correct: Current correct streak
        success_rate: Success rate over the full log

    Returns:
        Fresh BehavioralFlags (nothing carries over from earlier calls)
    """
    window = recent_window(interactions)
    flags = BehavioralFlags()

    if len(window) >= MIN_TIMING_SAMPLES:
        avg_time_spent = sum(r.time_spent_ms for r in window) / len(window)

        if avg_time_spent < RUSHING_MAX_MEAN_MS:
            flags.rushing = BehaviorPattern(True, list(RUSHING_ACTIONS))
        elif avg_time_spent > HESITATING_MIN_MEAN_MS:
            flags.hesitating = BehaviorPattern(True, list(HESITATING_ACTIONS))

    if is_fatigued(window):
        flags.fatigued = BehaviorPattern(True, list(FATIGUED_ACTIONS))

    if consecutive_correct >= MASTERY_STREAK and success_rate > MASTERY_SUCCESS_RATE:
        flags.mastered = BehaviorPattern(True, list(MASTERED_ACTIONS))

    return flags
