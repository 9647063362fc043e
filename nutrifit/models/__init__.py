"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from nutrifit.models.achievement import SocialAchievement
from nutrifit.models.base import Base
from nutrifit.models.challenge import (
    ChallengeParticipant,
    ChallengeProgress,
    CommunityChallenge,
)
from nutrifit.models.credit_transaction import CreditTransaction
from nutrifit.models.enums import (
    ChallengeType,
    ParticipationStatus,
    ReferralInteraction,
    ReferralMethod,
    ReferralSource,
    ReferralStatus,
    SideEffectKind,
    SideEffectStatus,
)
from nutrifit.models.referral import Referral
from nutrifit.models.side_effect import PendingSideEffect
from nutrifit.models.user import UserAccount


__all__ = [
    "Base",
    # Users and ledger
    "UserAccount",
    "CreditTransaction",
    # Referrals
    "Referral",
    # Challenges
    "CommunityChallenge",
    "ChallengeParticipant",
    "ChallengeProgress",
    # Engagement
    "SocialAchievement",
    "PendingSideEffect",
    # Enums
    "ChallengeType",
    "ParticipationStatus",
    "ReferralInteraction",
    "ReferralMethod",
    "ReferralSource",
    "ReferralStatus",
    "SideEffectKind",
    "SideEffectStatus",
]
