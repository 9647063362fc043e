"""
Unit tests for challenge success criteria.

Tests cover:
- Consecutive-day streaks
- Variety, goal and seasonal criteria
- Payload validation
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

import pytest

from nutrifit.models.enums import ChallengeType
from nutrifit.services.challenge.criteria import (
    ConsistencyCriteria,
    evaluate_success_criteria,
    longest_consecutive_streak,
    parse_reward_structure,
    parse_success_criteria,
)
from nutrifit.utils.exceptions import InvalidChallengeDefinition


START = date(2026, 3, 1)


@dataclass
class Entry:
    progress_date: date
    daily_score: int = 0
    progress_data: dict[str, Any] = field(default_factory=dict)


def days(*offsets: int) -> list[date]:
    return [START + timedelta(days=d) for d in offsets]


class TestConsecutiveStreak:
    """Test longest run of consecutive days."""

    def test_gap_restarts_run(self):
        """Test days 1,2,3,5,6,7,8 give a streak of 4."""
        assert longest_consecutive_streak(days(1, 2, 3, 5, 6, 7, 8)) == 4

    def test_unordered_dates(self):
        """Test dates are sorted before counting."""
        assert longest_consecutive_streak(days(3, 1, 2)) == 3

    def test_duplicates_counted_once(self):
        """Test a repeated date neither extends nor breaks the run."""
        assert longest_consecutive_streak(days(1, 2, 2, 3)) == 3

    def test_empty(self):
        """Test no dates give zero."""
        assert longest_consecutive_streak([]) == 0

    def test_single_day(self):
        """Test one date gives one."""
        assert longest_consecutive_streak(days(0)) == 1


class TestEvaluateCriteria:
    """Test evaluation per challenge type."""

    def test_consistency_met(self):
        """Test streak equal to the requirement passes."""
        history = [Entry(d) for d in days(1, 2, 3, 5, 6, 7, 8)]
        assert evaluate_success_criteria(
            {"consecutive_days": 4}, history, ChallengeType.CONSISTENCY
        )

    def test_consistency_not_met(self):
        """Test shorter streak fails."""
        history = [Entry(d) for d in days(1, 2, 3, 5, 6, 7, 8)]
        assert not evaluate_success_criteria(
            {"consecutive_days": 5}, history, ChallengeType.CONSISTENCY
        )

    def test_variety_counts_distinct_fruits(self):
        """Test fruits are unioned across entries."""
        history = [
            Entry(START, progress_data={"fruits": ["apple", "kiwi"]}),
            Entry(START + timedelta(days=1), progress_data={"fruits": ["kiwi", "mango"]}),
            Entry(START + timedelta(days=2)),
        ]
        assert evaluate_success_criteria(
            {"unique_fruits": 3}, history, ChallengeType.VARIETY
        )
        assert not evaluate_success_criteria(
            {"unique_fruits": 4}, history, "variety"
        )

    def test_goal_sums_daily_scores(self):
        """Test goal compares the sum of daily scores."""
        history = [Entry(START, 40), Entry(START + timedelta(days=1), 60)]
        assert evaluate_success_criteria(
            {"target_score": 100}, history, ChallengeType.GOAL_BASED
        )
        assert not evaluate_success_criteria(
            {"target_score": 101}, history, ChallengeType.GOAL_BASED
        )

    def test_seasonal_never_met(self):
        """Test seasonal criteria always evaluate to false."""
        history = [Entry(d, 100) for d in days(0, 1, 2)]
        assert not evaluate_success_criteria(
            {"anything": 1}, history, ChallengeType.SEASONAL
        )

    def test_missing_threshold_never_met(self):
        """Test criteria without a threshold evaluate to false."""
        history = [Entry(d, 10) for d in days(0, 1)]
        assert not evaluate_success_criteria({}, history, ChallengeType.CONSISTENCY)
        assert not evaluate_success_criteria({}, history, ChallengeType.GOAL_BASED)

    def test_accepts_parsed_model(self):
        """Test a parsed criteria model is used as is."""
        history = [Entry(d) for d in days(0, 1)]
        assert evaluate_success_criteria(
            ConsistencyCriteria(consecutive_days=2),
            history,
            ChallengeType.CONSISTENCY,
        )


class TestPayloadParsing:
    """Test typed payload parsing."""

    def test_criteria_model_selected_by_type(self):
        """Test the challenge type picks the model."""
        parsed = parse_success_criteria("consistency", {"consecutive_days": 7})
        assert isinstance(parsed, ConsistencyCriteria)
        assert parsed.consecutive_days == 7

    def test_unknown_type_rejected(self):
        """Test unknown challenge types raise."""
        with pytest.raises(InvalidChallengeDefinition):
            parse_success_criteria("marathon", {})

    def test_malformed_threshold_rejected(self):
        """Test non-numeric thresholds raise."""
        with pytest.raises(InvalidChallengeDefinition):
            parse_success_criteria(ChallengeType.VARIETY, {"unique_fruits": "many"})

    def test_reward_structure_defaults(self):
        """Test empty reward structure parses with defaults."""
        rewards = parse_reward_structure(None)
        assert rewards.credits is None
        assert rewards.completion_points == 0
        assert rewards.badges == []
