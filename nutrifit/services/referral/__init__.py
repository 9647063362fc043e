"""
Referral services package.

Contains modular services for referral processing:
- code_generator: Random code creation and normalisation
- referral_service: Code issuing, redemption, first-purchase rewards, expiry
- analytics: Conversion statistics
- share: Share text and links
- schemas: Result types
"""

from nutrifit.services.referral.analytics import (
    ReferralAnalyticsService,
    build_analytics,
)
from nutrifit.services.referral.code_generator import (
    make_referral_code,
    normalize_code,
)
from nutrifit.services.referral.referral_service import ReferralService
from nutrifit.services.referral.schemas import (
    ReferralAnalytics,
    ReferralReward,
    ShareContent,
    SourceBreakdown,
)
from nutrifit.services.referral.share import generate_share_content


__all__ = [
    # Services
    "ReferralService",
    "ReferralAnalyticsService",
    # Helpers
    "build_analytics",
    "generate_share_content",
    "make_referral_code",
    "normalize_code",
    # Result types
    "ReferralAnalytics",
    "ReferralReward",
    "ShareContent",
    "SourceBreakdown",
]
