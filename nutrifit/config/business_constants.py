"""
Business logic constants for the engagement engine.

Central location for referral and challenge rules. Imported by services and
jobs without circular dependencies.
"""

import string
from decimal import Decimal

from nutrifit.config.settings import settings


# =============================================================================
# REFERRALS
# =============================================================================

REFERRAL_CODE_LENGTH = 8
REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
REFERRAL_CODE_MAX_ATTEMPTS = 10

BASE_REFERRER_REWARD = Decimal("10.00")
BASE_REFEREE_REWARD = Decimal("5.00")

# Unredeemed pending referrals older than this are swept to "expired"
REFERRAL_EXPIRY_DAYS = settings.referral_expiry_days

# Bonus tier by number of successful (earned/credited) referrals.
# Checked top-down; first threshold reached wins.
BONUS_TIERS: tuple[tuple[int, Decimal], ...] = (
    (25, Decimal("2.0")),
    (10, Decimal("1.5")),
    (5, Decimal("1.2")),
)
DEFAULT_BONUS_TIER = Decimal("1.0")

# Referral milestone achievements: (min successful referrals, name, points)
REFERRAL_ACHIEVEMENTS: tuple[tuple[int, str, int], ...] = (
    (25, "Referral Ambassador", 1000),
    (10, "Referral Expert", 500),
    (5, "Referral Champion", 250),
)
DEFAULT_REFERRAL_ACHIEVEMENT = ("First Referral", 100)

TOP_REFERRAL_SOURCES_LIMIT = 5

SHARE_TITLE = "Join me on DailyNutriFit!"
SHARE_IMAGE_PATH = "/assets/referral-share.jpg"


# =============================================================================
# CHALLENGES
# =============================================================================

MIN_DIFFICULTY_LEVEL = 1
MAX_DIFFICULTY_LEVEL = 5

FEATURED_CHALLENGES_LIMIT = 5
LEADERBOARD_LIMIT = 50
RECOMMENDATIONS_LIMIT = 3

# Types suggested to users without any completed challenge
DEFAULT_RECOMMENDED_TYPES = ("consistency", "variety")


# =============================================================================
# LEDGER
# =============================================================================

CREDIT_REASON_REFERRER_REWARD = "referral_referrer_reward"
CREDIT_REASON_REFEREE_REWARD = "referral_referee_reward"
CREDIT_REASON_CHALLENGE_REWARD = "challenge_completion_reward"
