"""
User repository.

Data access layer for UserAccount model.
"""

import uuid
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.user import UserAccount
from nutrifit.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserAccount]):
    """User repository with atomic balance updates."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(UserAccount, session)

    async def increment_credit_balance(
        self, user_id: uuid.UUID, amount: Decimal
    ) -> bool:
        """
        Atomically add credits to a user's wallet.

        Args:
            user_id: User ID
            amount: Amount to add

        Returns:
            True if the user row was updated
        """
        stmt = (
            update(UserAccount)
            .where(UserAccount.id == user_id)
            .values(credit_balance=UserAccount.credit_balance + amount)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def increment_referral_earnings(
        self, user_id: uuid.UUID, amount: Decimal
    ) -> bool:
        """
        Atomically add to a referrer's lifetime referral earnings.

        Args:
            user_id: Referrer user ID
            amount: Amount earned

        Returns:
            True if the user row was updated
        """
        stmt = (
            update(UserAccount)
            .where(UserAccount.id == user_id)
            .values(
                referral_credits_earned=(
                    UserAccount.referral_credits_earned + amount
                )
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
