"""
Challenge statistics and leaderboard.
"""

import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.config.business_constants import LEADERBOARD_LIMIT
from nutrifit.models.challenge import ChallengeParticipant
from nutrifit.models.enums import ParticipationStatus
from nutrifit.repositories.challenge_repository import ChallengeRepository
from nutrifit.repositories.participant_repository import ParticipantRepository
from nutrifit.services.base_service import BaseService
from nutrifit.services.challenge.schemas import ChallengeStats, LeaderboardEntry
from nutrifit.utils.datetime_utils import days_until


def build_challenge_stats(
    participants: Sequence[ChallengeParticipant],
    end_date: datetime | None,
    requester_id: uuid.UUID | None = None,
    now: datetime | None = None,
) -> ChallengeStats:
    """
    Aggregate participant statistics.

    Rank is the 1-based position in ``participants``, which must already be
    ordered by final score, highest first. The list is not re-sorted.

    Args:
        participants: Participants ordered by score descending
        end_date: Challenge end, or None when the challenge is unknown
        requester_id: User whose rank and score to report
        now: Reference time for days remaining

    Returns:
        Challenge statistics (zeros for an empty list)
    """
    stats = ChallengeStats(
        days_remaining=days_until(end_date, now) if end_date else 0,
    )

    total = len(participants)
    if total == 0:
        return stats

    stats.total_participants = total
    stats.active_participants = sum(
        1 for p in participants if p.status == ParticipationStatus.ACTIVE.value
    )
    stats.completed_participants = sum(
        1
        for p in participants
        if p.status == ParticipationStatus.COMPLETED.value
    )
    stats.average_score = sum(p.final_score for p in participants) / total
    stats.completion_rate = stats.completed_participants / total * 100

    if requester_id is not None:
        for position, participant in enumerate(participants, start=1):
            if participant.user_id == requester_id:
                stats.user_rank = position
                stats.user_score = participant.final_score
                break

    return stats


class ChallengeStatsService(BaseService):
    """Read-only challenge aggregates."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize stats service."""
        super().__init__(session)
        self.challenge_repo = ChallengeRepository(session)
        self.participant_repo = ParticipantRepository(session)

    async def get_challenge_stats(
        self,
        challenge_id: uuid.UUID,
        requester_id: uuid.UUID | None = None,
    ) -> ChallengeStats:
        """
        Statistics over every participant of a challenge.

        Args:
            challenge_id: Challenge ID
            requester_id: Optional user to locate in the ranking

        Returns:
            Challenge statistics
        """
        challenge = await self.challenge_repo.get_by_id(challenge_id)
        participants = await self.participant_repo.get_ranked(challenge_id)

        return build_challenge_stats(
            participants,
            challenge.end_date if challenge else None,
            requester_id,
        )

    async def get_challenge_leaderboard(
        self, challenge_id: uuid.UUID, limit: int = LEADERBOARD_LIMIT
    ) -> list[LeaderboardEntry]:
        """
        Visible participants with their current position.

        Returns:
            Entries ordered by rank (empty for unknown challenges)
        """
        challenge = await self.challenge_repo.get_by_id(challenge_id)
        if challenge is None:
            return []

        participants = await self.participant_repo.get_ranked(
            challenge_id, visible_only=True, limit=limit
        )
        return [
            LeaderboardEntry(
                challenge_id=challenge.id,
                challenge_name=challenge.name,
                user_id=participant.user_id,
                final_score=participant.final_score,
                current_rank=position,
                completion_status=participant.status,
                challenge_active=challenge.is_active,
                joined_at=participant.joined_at,
                completion_date=participant.completion_date,
            )
            for position, participant in enumerate(participants, start=1)
        ]
