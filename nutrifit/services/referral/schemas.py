"""
Referral result types returned by the referral services.
"""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class ReferralReward:
    """Rewards computed when a referee completes their first purchase."""

    referrer_reward: Decimal
    referee_reward: Decimal
    bonus_multiplier: Decimal

    @property
    def total_earned(self) -> Decimal:
        return self.referrer_reward + self.referee_reward


@dataclass(frozen=True)
class SourceBreakdown:
    """Referral count and share for one source channel."""

    source: str
    count: int
    conversion_rate: float


@dataclass
class ReferralAnalytics:
    """Aggregated referral performance of one referrer."""

    total_referrals: int = 0
    successful_signups: int = 0
    converted_purchases: int = 0
    total_rewards_earned: Decimal = Decimal("0")
    avg_conversion_days: float = 0.0
    conversion_rate: float = 0.0
    top_referral_sources: list[SourceBreakdown] = field(default_factory=list)


@dataclass(frozen=True)
class ShareContent:
    """Text and links for sharing a referral code."""

    title: str
    message: str
    url: str
    image: str | None = None
