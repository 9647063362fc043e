"""
Referral code generation.

Codes are REFERRAL_CODE_LENGTH characters drawn from [A-Z0-9].
"""

import secrets

from nutrifit.config.business_constants import (
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
)


def make_referral_code(length: int = REFERRAL_CODE_LENGTH) -> str:
    """Random code; uniqueness is checked against the store by the caller."""
    return "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(length)
    )


def normalize_code(code: str) -> str:
    """Codes are matched case-insensitively and stored upper-case."""
    return code.strip().upper()
