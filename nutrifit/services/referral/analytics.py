"""
Referral analytics.

Aggregates a referrer's referrals into conversion statistics.
"""

import uuid
from collections import Counter
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.config.business_constants import TOP_REFERRAL_SOURCES_LIMIT
from nutrifit.models.referral import Referral
from nutrifit.repositories.referral_repository import (
    SUCCESSFUL_STATUSES,
    ReferralRepository,
)
from nutrifit.services.base_service import BaseService
from nutrifit.services.referral.schemas import ReferralAnalytics, SourceBreakdown
from nutrifit.utils.datetime_utils import ensure_aware
from nutrifit.utils.exceptions import Unauthenticated


SECONDS_PER_DAY = 86400


def build_analytics(referrals: Sequence[Referral]) -> ReferralAnalytics:
    """
    Compute analytics from a referrer's referral rows.

    Args:
        referrals: All referrals issued by one user

    Returns:
        ReferralAnalytics (all zeros for an empty sequence)
    """
    total = len(referrals)
    if total == 0:
        return ReferralAnalytics()

    signups = [r for r in referrals if r.referee_id is not None]
    converted = [r for r in referrals if r.first_purchase_at is not None]

    total_rewards = sum(
        (
            Decimal(r.reward_amount)
            for r in referrals
            if r.status in SUCCESSFUL_STATUSES and r.reward_amount is not None
        ),
        Decimal("0"),
    )

    conversion_days = [
        (
            ensure_aware(r.first_purchase_at) - ensure_aware(r.invited_at)
        ).total_seconds()
        / SECONDS_PER_DAY
        for r in converted
    ]
    avg_conversion_days = (
        sum(conversion_days) / len(conversion_days) if conversion_days else 0.0
    )

    source_counts = Counter(r.source for r in referrals)
    top_sources = [
        SourceBreakdown(
            source=source,
            count=count,
            conversion_rate=count / total * 100,
        )
        for source, count in source_counts.most_common(TOP_REFERRAL_SOURCES_LIMIT)
    ]

    return ReferralAnalytics(
        total_referrals=total,
        successful_signups=len(signups),
        converted_purchases=len(converted),
        total_rewards_earned=total_rewards,
        avg_conversion_days=round(avg_conversion_days, 2),
        conversion_rate=len(converted) / total * 100,
        top_referral_sources=top_sources,
    )


class ReferralAnalyticsService(BaseService):
    """Read-only referral statistics."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral analytics service."""
        super().__init__(session)
        self.referral_repo = ReferralRepository(session)

    async def get_referral_analytics(
        self, requester_id: uuid.UUID | None
    ) -> ReferralAnalytics:
        """
        Conversion statistics for the requester's referrals.

        Raises:
            Unauthenticated: If requester_id is None
        """
        if requester_id is None:
            raise Unauthenticated()

        referrals = await self.referral_repo.get_by_referrer(requester_id)
        analytics = build_analytics(referrals)

        self.logger.debug(
            "Referral analytics computed",
            extra={
                "referrer_id": str(requester_id),
                "total_referrals": analytics.total_referrals,
            },
        )
        return analytics
