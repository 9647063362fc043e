"""
Challenge participant repository.

Data access layer for ChallengeParticipant model.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.challenge import ChallengeParticipant, CommunityChallenge
from nutrifit.models.enums import ParticipationStatus
from nutrifit.repositories.base import BaseRepository


class ParticipantRepository(BaseRepository[ChallengeParticipant]):
    """Participant repository with ranking and status queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize participant repository."""
        super().__init__(ChallengeParticipant, session)

    async def get_for_user(
        self, challenge_id: uuid.UUID, user_id: uuid.UUID
    ) -> ChallengeParticipant | None:
        """Get a user's participation in a challenge."""
        return await self.get_by(challenge_id=challenge_id, user_id=user_id)

    async def count_for_challenge(self, challenge_id: uuid.UUID) -> int:
        """Count every participant of a challenge, hidden ones included."""
        stmt = select(func.count(ChallengeParticipant.id)).where(
            ChallengeParticipant.challenge_id == challenge_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_ranked(
        self,
        challenge_id: uuid.UUID,
        visible_only: bool = False,
        limit: int | None = None,
    ) -> list[ChallengeParticipant]:
        """
        Get participants ordered by final score, highest first.

        Ties keep the store's ordering.

        Args:
            challenge_id: Challenge ID
            visible_only: Exclude participants who hid themselves
            limit: Max number of results

        Returns:
            List of participants
        """
        stmt = select(ChallengeParticipant).where(
            ChallengeParticipant.challenge_id == challenge_id
        )
        if visible_only:
            stmt = stmt.where(ChallengeParticipant.is_visible.is_(True))
        stmt = stmt.order_by(ChallengeParticipant.final_score.desc())
        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active_for_challenge(
        self, challenge_id: uuid.UUID
    ) -> list[ChallengeParticipant]:
        """Get active participants of a challenge."""
        return await self.find_by(
            challenge_id=challenge_id,
            status=ParticipationStatus.ACTIVE.value,
        )

    async def get_active_with_challenge(
        self, user_id: uuid.UUID
    ) -> list[tuple[ChallengeParticipant, CommunityChallenge]]:
        """
        Get a user's active participations joined with their challenges.

        Args:
            user_id: User ID

        Returns:
            List of (participant, challenge), most recently joined first
        """
        stmt = (
            select(ChallengeParticipant, CommunityChallenge)
            .join(
                CommunityChallenge,
                CommunityChallenge.id == ChallengeParticipant.challenge_id,
            )
            .where(
                ChallengeParticipant.user_id == user_id,
                ChallengeParticipant.status == ParticipationStatus.ACTIVE.value,
            )
            .order_by(ChallengeParticipant.joined_at.desc())
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def get_completed_types(self, user_id: uuid.UUID) -> list[str]:
        """Distinct types of the challenges a user has completed."""
        stmt = (
            select(CommunityChallenge.challenge_type)
            .join(
                ChallengeParticipant,
                ChallengeParticipant.challenge_id == CommunityChallenge.id,
            )
            .where(
                ChallengeParticipant.user_id == user_id,
                ChallengeParticipant.status
                == ParticipationStatus.COMPLETED.value,
            )
            .distinct()
        )
        result = await self.session.execute(stmt)
        return [row[0] for row in result.all()]

    async def set_final_score(
        self, participant_id: uuid.UUID, score: int
    ) -> None:
        """Store the participant's new cumulative score."""
        stmt = (
            update(ChallengeParticipant)
            .where(ChallengeParticipant.id == participant_id)
            .values(final_score=score)
        )
        await self.session.execute(stmt)

    async def close_active(
        self,
        participant_id: uuid.UUID,
        status: str,
        completion_date: datetime,
        rewards_earned: dict[str, Any] | None = None,
    ) -> bool:
        """
        Move an active participation to a terminal status.

        Args:
            participant_id: Participant ID
            status: completed | failed | withdrawn
            completion_date: Transition time
            rewards_earned: Reward snapshot for completions

        Returns:
            False if the participation was no longer active
        """
        values: dict[str, Any] = {
            "status": status,
            "completion_date": completion_date,
        }
        if rewards_earned is not None:
            values["rewards_earned"] = rewards_earned

        stmt = (
            update(ChallengeParticipant)
            .where(
                ChallengeParticipant.id == participant_id,
                ChallengeParticipant.status
                == ParticipationStatus.ACTIVE.value,
            )
            .values(**values)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
