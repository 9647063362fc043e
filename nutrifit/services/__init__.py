"""
Services.

Business logic layer.
"""

from nutrifit.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)
from nutrifit.services.challenge import ChallengeService
from nutrifit.services.credit_ledger import CreditLedger
from nutrifit.services.referral import (
    ReferralAnalyticsService,
    ReferralService,
    generate_share_content,
)
from nutrifit.services.side_effects import SideEffectService


__all__ = [
    "BaseService",
    "log_operation",
    "transaction",
    "ChallengeService",
    "CreditLedger",
    "ReferralAnalyticsService",
    "ReferralService",
    "SideEffectService",
    "generate_share_content",
]
