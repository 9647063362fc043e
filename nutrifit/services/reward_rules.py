"""
Reward rules.

Pure functions mapping referral success counts to bonus tiers and milestone
achievements. No I/O.
"""

from dataclasses import dataclass
from decimal import Decimal

from nutrifit.config.business_constants import (
    BONUS_TIERS,
    DEFAULT_BONUS_TIER,
    DEFAULT_REFERRAL_ACHIEVEMENT,
    REFERRAL_ACHIEVEMENTS,
)


@dataclass(frozen=True)
class Milestone:
    """Referral milestone achievement."""

    name: str
    points: int

    @property
    def badge(self) -> str:
        """Badge slug, e.g. "Referral Expert" -> "referral_expert"."""
        return "_".join(self.name.lower().split())


def bonus_tier_for_count(successful_referrals: int) -> Decimal:
    """
    Map a successful-referral count to the referrer's bonus multiplier.

    <5 -> 1.0, 5-9 -> 1.2, 10-24 -> 1.5, >=25 -> 2.0

    Args:
        successful_referrals: Earned or credited referrals so far

    Returns:
        Bonus multiplier
    """
    for threshold, tier in BONUS_TIERS:
        if successful_referrals >= threshold:
            return tier
    return DEFAULT_BONUS_TIER


def referral_milestone_for_count(successful_referrals: int) -> Milestone:
    """Achievement tier reached with the given number of successful referrals."""
    for threshold, name, points in REFERRAL_ACHIEVEMENTS:
        if successful_referrals >= threshold:
            return Milestone(name=name, points=points)
    name, points = DEFAULT_REFERRAL_ACHIEVEMENT
    return Milestone(name=name, points=points)
