"""
Adaptation Errors

Exceptions raised by the adaptation engine and the session manager.
"""


class AdaptationError(Exception):
    """Base class for adaptation engine errors."""


class InvalidAgeGroup(AdaptationError):
    """Raised when an age group tag doesn't match a known profile."""

    def __init__(self, age_group):
        self.age_group = age_group
        super().__init__(f"Unknown age group: {age_group!r}")


class EngineNotInitialized(AdaptationError):
    """Raised when interactions are recorded before an age group is bound."""


class InvalidInteractionRecord(AdaptationError):
    """Raised when an interaction record fails validation (state is untouched)."""


class UnknownSession(AdaptationError):
    """Raised when a session id is not hosted by the session manager."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Unknown session: {session_id}")
