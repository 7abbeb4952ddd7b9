"""
Age Group Profiles

Static per-age-band adaptation configuration.

Younger children need more evidence (a longer correct streak) before content
gets harder; every band simplifies after two misses in a row.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from playlearn_adaptive.errors import InvalidAgeGroup


# Hint vocabulary the content layer knows how to apply
SIMPLIFICATION_HINTS = frozenset({
    "reduceChoices",
    "addVisualHints",
    "slowDownPace",
    "provideHints",
    "breakDownSteps",
    "addContext",
    "simplifyScenarios",
})

COMPLEXITY_HINTS = frozenset({
    "addChoices",
    "removeHints",
    "increaseVariety",
    "addSteps",
    "increaseComplexity",
    "removeContext",
    "addNuance",
    "increaseConsequences",
})

# Applied when frustration peaks, regardless of age band
EMERGENCY_HINTS: Tuple[str, ...] = (
    "reduceChoices",
    "addVisualHints",
    "slowDownPace",
    "provideHints",
    "addEncouragement",
    "simplifyToMinimum",
)


@dataclass(frozen=True)
class AgeGroupProfile:
    """Thresholds and adaptation steps for one age band."""
    age_group: str
    incorrect_threshold: int
    correct_threshold: int
    simplification_steps: Tuple[str, ...]
    complexity_steps: Tuple[str, ...]

    def simplification_hints(self) -> List[str]:
        """Simplification steps the content layer can act on, in profile order."""
        return [step for step in self.simplification_steps if step in SIMPLIFICATION_HINTS]

    def complexity_hints(self) -> List[str]:
        """Complexity steps the content layer can act on, in profile order."""
        return [step for step in self.complexity_steps if step in COMPLEXITY_HINTS]

    def to_dict(self) -> Dict[str, object]:
        return {
            "ageGroup": self.age_group,
            "incorrectThreshold": self.incorrect_threshold,
            "correctThreshold": self.correct_threshold,
            "simplificationSteps": list(self.simplification_steps),
            "complexitySteps": list(self.complexity_steps),
        }


AGE_GROUP_PROFILES: Dict[str, AgeGroupProfile] = {
    "3-5": AgeGroupProfile(
        age_group="3-5",
        incorrect_threshold=2,
        correct_threshold=3,
        simplification_steps=("reduceChoices", "addVisualHints", "slowDownPace"),
        complexity_steps=("addChoices", "removeHints", "increaseVariety"),
    ),
    "6-9": AgeGroupProfile(
        age_group="6-9",
        incorrect_threshold=2,
        correct_threshold=2,
        simplification_steps=("provideHints", "breakDownSteps", "reduceComplexity"),
        complexity_steps=("removeHints", "addSteps", "increaseComplexity"),
    ),
    "10-12": AgeGroupProfile(
        age_group="10-12",
        incorrect_threshold=2,
        correct_threshold=2,
        simplification_steps=("addContext", "provideExamples", "simplifyScenarios"),
        complexity_steps=("removeContext", "addNuance", "increaseConsequences"),
    ),
}


def get_profile(age_group: str) -> AgeGroupProfile:
    """
    Look up the profile for an age group tag.

    Args:
        age_group: One of "3-5", "6-9", "10-12"

    Returns:
        The matching AgeGroupProfile

    Raises:
        InvalidAgeGroup: If the tag is not a known age group
    """
    try:
        return AGE_GROUP_PROFILES[age_group]
    except (KeyError, TypeError):
        raise InvalidAgeGroup(age_group) from None
