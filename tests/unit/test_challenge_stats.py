"""Unit tests for challenge statistics."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from nutrifit.services.challenge.stats import build_challenge_stats


NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


def participant(score: int, status: str = "active", user_id=None):
    p = MagicMock()
    p.final_score = score
    p.status = status
    p.user_id = user_id or uuid.uuid4()
    return p


class TestBuildChallengeStats:
    """Test aggregate statistics."""

    def test_empty_list_returns_zeros(self):
        """Test no division errors without participants."""
        stats = build_challenge_stats([], NOW + timedelta(days=3), now=NOW)

        assert stats.total_participants == 0
        assert stats.active_participants == 0
        assert stats.completed_participants == 0
        assert stats.average_score == 0
        assert stats.completion_rate == 0
        assert stats.user_rank is None

    def test_aggregates(self):
        """Test counts, mean score and completion rate."""
        participants = [
            participant(90, "completed"),
            participant(60, "active"),
            participant(30, "withdrawn"),
            participant(20, "completed"),
        ]

        stats = build_challenge_stats(participants, NOW, now=NOW)

        assert stats.total_participants == 4
        assert stats.active_participants == 1
        assert stats.completed_participants == 2
        assert stats.average_score == 50
        assert stats.completion_rate == 50

    def test_rank_is_position_in_store_order(self):
        """Test rank is not recomputed by re-sorting."""
        me = uuid.uuid4()
        # Store order is authoritative even when scores tie
        participants = [participant(50), participant(50, user_id=me), participant(10)]

        stats = build_challenge_stats(participants, NOW, requester_id=me, now=NOW)

        assert stats.user_rank == 2
        assert stats.user_score == 50

    def test_non_participant_has_no_rank(self):
        """Test requester outside the list gets no rank."""
        stats = build_challenge_stats(
            [participant(10)], NOW, requester_id=uuid.uuid4(), now=NOW
        )
        assert stats.user_rank is None
        assert stats.user_score is None

    def test_days_remaining_rounds_up(self):
        """Test partial days count as a full day."""
        stats = build_challenge_stats([], NOW + timedelta(days=2, hours=1), now=NOW)
        assert stats.days_remaining == 3

    def test_days_remaining_clamped(self):
        """Test ended challenges report zero days."""
        stats = build_challenge_stats([], NOW - timedelta(days=5), now=NOW)
        assert stats.days_remaining == 0

    def test_unknown_challenge_has_no_days(self):
        """Test missing end date gives zero days."""
        assert build_challenge_stats([], None).days_remaining == 0
