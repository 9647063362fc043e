"""
Referral repository.

Data access layer for Referral model. State transitions are conditional
updates so that concurrent callers cannot both win.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.enums import ReferralStatus
from nutrifit.models.referral import Referral
from nutrifit.repositories.base import BaseRepository


SUCCESSFUL_STATUSES = (
    ReferralStatus.EARNED.value,
    ReferralStatus.CREDITED.value,
)


class ReferralRepository(BaseRepository[Referral]):
    """Referral repository with code and status queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral repository."""
        super().__init__(Referral, session)

    async def code_exists(self, code: str) -> bool:
        """Check whether any referral already uses the code."""
        return await self.exists(code=code)

    async def get_by_code(self, code: str) -> Referral | None:
        """Get referral by exact code."""
        return await self.get_by(code=code)

    async def get_redeemable(self, code: str) -> Referral | None:
        """
        Get a pending referral with no redeemer yet.

        Args:
            code: Upper-cased referral code

        Returns:
            Referral or None
        """
        stmt = select(Referral).where(
            Referral.code == code,
            Referral.status == ReferralStatus.PENDING.value,
            Referral.referee_id.is_(None),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def redeem(
        self,
        referral_id: uuid.UUID,
        referee_id: uuid.UUID,
        signed_up_at: datetime,
    ) -> bool:
        """
        Attach a referee to a still-redeemable referral.

        Returns:
            False when another redemption got there first
        """
        stmt = (
            update(Referral)
            .where(
                Referral.id == referral_id,
                Referral.status == ReferralStatus.PENDING.value,
                Referral.referee_id.is_(None),
            )
            .values(referee_id=referee_id, signed_up_at=signed_up_at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def get_pending_for_referee(
        self, referee_id: uuid.UUID
    ) -> Referral | None:
        """Get the pending referral redeemed by this user, if any."""
        stmt = (
            select(Referral)
            .where(
                Referral.referee_id == referee_id,
                Referral.status == ReferralStatus.PENDING.value,
            )
            .order_by(Referral.signed_up_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def mark_earned(
        self,
        referral_id: uuid.UUID,
        reward_amount: Decimal,
        first_purchase_at: datetime,
    ) -> bool:
        """
        Flip a pending referral to earned.

        Returns:
            False if the referral was no longer pending
        """
        stmt = (
            update(Referral)
            .where(
                Referral.id == referral_id,
                Referral.status == ReferralStatus.PENDING.value,
            )
            .values(
                status=ReferralStatus.EARNED.value,
                reward_amount=reward_amount,
                first_purchase_at=first_purchase_at,
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def count_successful(self, referrer_id: uuid.UUID) -> int:
        """Count the referrer's earned or credited referrals."""
        stmt = select(func.count(Referral.id)).where(
            Referral.referrer_id == referrer_id,
            Referral.status.in_(SUCCESSFUL_STATUSES),
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_by_referrer(
        self, referrer_id: uuid.UUID, status: str | None = None
    ) -> list[Referral]:
        """
        Get referrals issued by a user, newest first.

        Args:
            referrer_id: Referrer user ID
            status: Optional status filter

        Returns:
            List of referrals
        """
        stmt = select(Referral).where(Referral.referrer_id == referrer_id)
        if status:
            stmt = stmt.where(Referral.status == status)
        stmt = stmt.order_by(Referral.invited_at.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_latest_pending_code(
        self, referrer_id: uuid.UUID
    ) -> str | None:
        """Newest pending code issued by the user."""
        stmt = (
            select(Referral.code)
            .where(
                Referral.referrer_id == referrer_id,
                Referral.status == ReferralStatus.PENDING.value,
            )
            .order_by(Referral.invited_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def expire_unredeemed_before(self, cutoff: datetime) -> int:
        """
        Expire pending referrals nobody redeemed before the cutoff.

        Args:
            cutoff: invited_at threshold

        Returns:
            Number of referrals expired
        """
        stmt = (
            update(Referral)
            .where(
                Referral.status == ReferralStatus.PENDING.value,
                Referral.referee_id.is_(None),
                Referral.invited_at < cutoff,
            )
            .values(status=ReferralStatus.EXPIRED.value)
            .returning(Referral.id)
        )
        result = await self.session.execute(stmt)
        return len(result.all())
