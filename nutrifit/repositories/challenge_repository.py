"""
Challenge repository.

Data access layer for CommunityChallenge model.
"""

import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.challenge import CommunityChallenge
from nutrifit.repositories.base import BaseRepository


class ChallengeRepository(BaseRepository[CommunityChallenge]):
    """Challenge catalogue queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize challenge repository."""
        super().__init__(CommunityChallenge, session)

    async def get_public(
        self,
        challenge_type: str | None = None,
        only_active: bool = True,
    ) -> list[CommunityChallenge]:
        """
        Get public challenges, featured first then newest.

        Args:
            challenge_type: Optional type filter
            only_active: Exclude inactive challenges

        Returns:
            List of challenges
        """
        stmt = select(CommunityChallenge).where(
            CommunityChallenge.is_public.is_(True)
        )
        if only_active:
            stmt = stmt.where(CommunityChallenge.is_active.is_(True))
        if challenge_type:
            stmt = stmt.where(CommunityChallenge.challenge_type == challenge_type)

        stmt = stmt.order_by(
            CommunityChallenge.featured_priority.desc(),
            CommunityChallenge.start_date.desc(),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_featured(self, limit: int) -> list[CommunityChallenge]:
        """Public active challenges with a positive featured priority."""
        stmt = (
            select(CommunityChallenge)
            .where(
                CommunityChallenge.is_public.is_(True),
                CommunityChallenge.is_active.is_(True),
                CommunityChallenge.featured_priority > 0,
            )
            .order_by(CommunityChallenge.featured_priority.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_public_by_types(
        self, challenge_types: Sequence[str], limit: int
    ) -> list[CommunityChallenge]:
        """Public active challenges of the given types, featured first."""
        stmt = (
            select(CommunityChallenge)
            .where(
                CommunityChallenge.is_public.is_(True),
                CommunityChallenge.is_active.is_(True),
                CommunityChallenge.challenge_type.in_(list(challenge_types)),
            )
            .order_by(CommunityChallenge.featured_priority.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active_ids(self) -> list[uuid.UUID]:
        """IDs of all active challenges."""
        stmt = select(CommunityChallenge.id).where(
            CommunityChallenge.is_active.is_(True)
        )
        result = await self.session.execute(stmt)
        return [row[0] for row in result.all()]
