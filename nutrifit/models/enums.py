"""
Enumerations shared by models and services.
"""

from enum import Enum


class ReferralStatus(str, Enum):
    """Referral reward status."""

    PENDING = "pending"
    EARNED = "earned"
    CREDITED = "credited"
    EXPIRED = "expired"


class ReferralMethod(str, Enum):
    """How the invitation was delivered."""

    CODE = "code"
    LINK = "link"
    QR_CODE = "qr_code"
    CONTACT_SHARE = "contact_share"


class ReferralSource(str, Enum):
    """Channel the invitation was shared through."""

    APP_SHARE = "app_share"
    SMS = "sms"
    EMAIL = "email"
    SOCIAL = "social"


class ReferralInteraction(str, Enum):
    """Tracked interactions with a shared referral code."""

    VIEW = "view"
    CLICK = "click"
    SIGNUP_ATTEMPT = "signup_attempt"


class ChallengeType(str, Enum):
    """Community challenge type, selects the success criteria."""

    CONSISTENCY = "consistency"
    VARIETY = "variety"
    SEASONAL = "seasonal"
    GOAL_BASED = "goal_based"


class ParticipationStatus(str, Enum):
    """Challenge participation status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    WITHDRAWN = "withdrawn"


class SideEffectKind(str, Enum):
    """Best-effort effect applied after a primary state transition."""

    CREDIT = "credit"
    REFERRAL_CREDIT = "referral_credit"
    ACHIEVEMENT = "achievement"


class SideEffectStatus(str, Enum):
    """Side effect processing status."""

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"
