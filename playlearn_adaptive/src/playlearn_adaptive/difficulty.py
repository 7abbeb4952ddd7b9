"""
Difficulty Levels

Five ordered difficulty ranks with saturating step up / step down.
"""

from enum import Enum
from typing import Union


class DifficultyLevel(Enum):
    """Difficulty ranks, ordered from easiest (1) to hardest (5)."""
    VERY_EASY = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    VERY_HARD = 5

    @property
    def rank(self) -> int:
        return self.value

    @property
    def tag(self) -> str:
        """Wire tag used by the content layer ("veryEasy", "medium", ...)."""
        return _TAGS[self]

    @classmethod
    def lowest(cls) -> "DifficultyLevel":
        return cls.VERY_EASY

    @classmethod
    def highest(cls) -> "DifficultyLevel":
        return cls.VERY_HARD

    @classmethod
    def starting(cls) -> "DifficultyLevel":
        """Every session starts in the middle."""
        return cls.MEDIUM

    @classmethod
    def parse(cls, value: Union["DifficultyLevel", str, int]) -> "DifficultyLevel":
        """
        Resolve a difficulty from an enum member, wire tag, member name or rank.

        Raises:
            ValueError: If the value names no difficulty level
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            for level, tag in _TAGS.items():
                if value == tag or value.upper() == level.name:
                    return level
        raise ValueError(f"Unknown difficulty level: {value!r}")

    def raised(self) -> "DifficultyLevel":
        """Raise difficulty by one rank."""
        if self.value < DifficultyLevel.VERY_HARD.value:
            return DifficultyLevel(self.value + 1)
        return self  # Already at max

    def lowered(self) -> "DifficultyLevel":
        """Lower difficulty by one rank."""
        if self.value > DifficultyLevel.VERY_EASY.value:
            return DifficultyLevel(self.value - 1)
        return self  # Already at min

    def __lt__(self, other):
        if not isinstance(other, DifficultyLevel):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other):
        if not isinstance(other, DifficultyLevel):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other):
        if not isinstance(other, DifficultyLevel):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other):
        if not isinstance(other, DifficultyLevel):
            return NotImplemented
        return self.value >= other.value


_TAGS = {
    DifficultyLevel.VERY_EASY: "veryEasy",
    DifficultyLevel.EASY: "easy",
    DifficultyLevel.MEDIUM: "medium",
    DifficultyLevel.HARD: "hard",
    DifficultyLevel.VERY_HARD: "veryHard",
}
