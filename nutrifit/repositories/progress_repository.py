"""
Challenge progress repository.

Data access layer for ChallengeProgress model.
"""

import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.challenge import ChallengeProgress
from nutrifit.repositories.base import BaseRepository


class ProgressRepository(BaseRepository[ChallengeProgress]):
    """Progress repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize progress repository."""
        super().__init__(ChallengeProgress, session)

    async def exists_for_date(
        self, participant_id: uuid.UUID, progress_date: date
    ) -> bool:
        """Check for an entry on the given calendar date."""
        return await self.exists(
            participant_id=participant_id, progress_date=progress_date
        )

    async def get_latest(
        self, participant_id: uuid.UUID
    ) -> ChallengeProgress | None:
        """Most recent entry by date."""
        stmt = (
            select(ChallengeProgress)
            .where(ChallengeProgress.participant_id == participant_id)
            .order_by(ChallengeProgress.progress_date.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_history(
        self, participant_id: uuid.UUID
    ) -> list[ChallengeProgress]:
        """All entries of a participant, oldest first."""
        stmt = (
            select(ChallengeProgress)
            .where(ChallengeProgress.participant_id == participant_id)
            .order_by(ChallengeProgress.progress_date.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
