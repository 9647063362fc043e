"""
Achievement repository.

Data access layer for SocialAchievement model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.achievement import SocialAchievement
from nutrifit.repositories.base import BaseRepository


class AchievementRepository(BaseRepository[SocialAchievement]):
    """Achievement repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize achievement repository."""
        super().__init__(SocialAchievement, session)
