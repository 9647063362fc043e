"""
Side effect repository.

Data access layer for PendingSideEffect model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.enums import SideEffectStatus
from nutrifit.models.side_effect import PendingSideEffect
from nutrifit.repositories.base import BaseRepository


class SideEffectRepository(BaseRepository[PendingSideEffect]):
    """Side effect queue repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize side effect repository."""
        super().__init__(PendingSideEffect, session)

    async def get_pending(self, limit: int) -> list[PendingSideEffect]:
        """
        Lock a batch of pending effects, oldest first.

        Rows locked by another worker are skipped.

        Args:
            limit: Batch size

        Returns:
            List of pending effects
        """
        stmt = (
            select(PendingSideEffect)
            .where(PendingSideEffect.status == SideEffectStatus.PENDING.value)
            .order_by(PendingSideEffect.created_at.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
