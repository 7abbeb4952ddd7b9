"""
Unit Tests for Difficulty Levels and Age Group Profiles

Tests saturating rank changes and profile lookup.
"""

import pytest

from playlearn_adaptive.age_profiles import AGE_GROUP_PROFILES, get_profile
from playlearn_adaptive.difficulty import DifficultyLevel
from playlearn_adaptive.errors import InvalidAgeGroup


class TestDifficultyLevel:
    """Test suite for DifficultyLevel."""

    def test_raise_difficulty(self):
        """Test raising difficulty one rank at a time."""
        assert DifficultyLevel.VERY_EASY.raised() == DifficultyLevel.EASY
        assert DifficultyLevel.MEDIUM.raised() == DifficultyLevel.HARD
        assert DifficultyLevel.VERY_HARD.raised() == DifficultyLevel.VERY_HARD  # Max

    def test_lower_difficulty(self):
        """Test lowering difficulty one rank at a time."""
        assert DifficultyLevel.VERY_HARD.lowered() == DifficultyLevel.HARD
        assert DifficultyLevel.MEDIUM.lowered() == DifficultyLevel.EASY
        assert DifficultyLevel.VERY_EASY.lowered() == DifficultyLevel.VERY_EASY  # Min

    def test_repeated_steps_stay_in_bounds(self):
        level = DifficultyLevel.starting()
        for _ in range(20):
            level = level.raised()
        assert level == DifficultyLevel.highest()
        for _ in range(20):
            level = level.lowered()
        assert level == DifficultyLevel.lowest()

    def test_ordering(self):
        assert DifficultyLevel.VERY_EASY < DifficultyLevel.EASY < DifficultyLevel.MEDIUM
        assert DifficultyLevel.VERY_HARD >= DifficultyLevel.HARD
        assert sorted(DifficultyLevel, reverse=True)[0] == DifficultyLevel.VERY_HARD

    def test_starting_level_is_medium(self):
        assert DifficultyLevel.starting() == DifficultyLevel.MEDIUM
        assert DifficultyLevel.starting().rank == 3

    def test_parse_tags_names_and_ranks(self):
        assert DifficultyLevel.parse("veryEasy") == DifficultyLevel.VERY_EASY
        assert DifficultyLevel.parse("hard") == DifficultyLevel.HARD
        assert DifficultyLevel.parse("VERY_HARD") == DifficultyLevel.VERY_HARD
        assert DifficultyLevel.parse(2) == DifficultyLevel.EASY
        assert DifficultyLevel.parse(DifficultyLevel.MEDIUM) == DifficultyLevel.MEDIUM

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            DifficultyLevel.parse("impossible")
        with pytest.raises(ValueError):
            DifficultyLevel.parse(9)


class TestAgeGroupProfiles:
    """Test suite for the static age group configuration."""

    def test_three_profiles(self):
        assert set(AGE_GROUP_PROFILES) == {"3-5", "6-9", "10-12"}

    def test_youngest_need_more_evidence(self):
        assert get_profile("3-5").correct_threshold == 3
        assert get_profile("6-9").correct_threshold == 2
        assert get_profile("10-12").correct_threshold == 2
        assert all(p.incorrect_threshold == 2 for p in AGE_GROUP_PROFILES.values())

    def test_hints_limited_to_known_vocabulary(self):
        assert get_profile("3-5").simplification_hints() == ["reduceChoices", "addVisualHints", "slowDownPace"]
        # "reduceComplexity" and "provideExamples" are not hints the content layer knows
        assert get_profile("6-9").simplification_hints() == ["provideHints", "breakDownSteps"]
        assert get_profile("10-12").simplification_hints() == ["addContext", "simplifyScenarios"]
        assert get_profile("10-12").complexity_hints() == ["removeContext", "addNuance", "increaseConsequences"]

    def test_unknown_age_group(self):
        with pytest.raises(InvalidAgeGroup) as exc_info:
            get_profile("13-15")
        assert exc_info.value.age_group == "13-15"

    def test_profile_to_dict(self):
        data = get_profile("6-9").to_dict()
        assert data["ageGroup"] == "6-9"
        assert data["incorrectThreshold"] == 2
        assert data["complexitySteps"] == ["removeHints", "addSteps", "increaseComplexity"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
