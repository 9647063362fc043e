"""
Exception types for the engagement engine.

Validation errors are raised to the caller and carry a user-facing message.
Best-effort failures (credits, achievements, expiry sweep) are never raised
from the services; they are logged instead.
"""

from sqlalchemy.exc import IntegrityError


class EngagementError(Exception):
    """Base class for business-rule violations."""

    code = "engagement_error"
    message = "Operation could not be completed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class Unauthenticated(EngagementError):
    code = "unauthenticated"
    message = "User not authenticated"


class LedgerError(EngagementError):
    code = "ledger_error"
    message = "Failed to apply wallet credit"


# Referrals


class CodeGenerationExhausted(EngagementError):
    code = "code_generation_exhausted"
    message = "Failed to generate unique referral code"


class InvalidOrExpiredCode(EngagementError):
    code = "invalid_or_expired_code"
    message = "Invalid or expired referral code"


class SelfReferral(EngagementError):
    code = "self_referral"
    message = "Cannot use your own referral code"


# Challenges


class ChallengeNotFound(EngagementError):
    code = "challenge_not_found"
    message = "Challenge not found"


class ChallengeUnavailable(EngagementError):
    code = "challenge_unavailable"
    message = "Challenge is not available for joining"


class AlreadyParticipating(EngagementError):
    code = "already_participating"
    message = "Already participating in this challenge"


class ChallengeFull(EngagementError):
    code = "challenge_full"
    message = "Challenge is at maximum capacity"


class RequirementsNotMet(EngagementError):
    code = "requirements_not_met"
    message = "User does not meet entry requirements"


class NotParticipating(EngagementError):
    code = "not_participating"
    message = "User is not participating in this challenge"


class InactiveParticipation(EngagementError):
    code = "inactive_participation"
    message = "Participation is no longer active"


class DuplicateProgressToday(EngagementError):
    code = "duplicate_progress_today"
    message = "Progress already recorded for today"


class InvalidChallengeDefinition(EngagementError):
    code = "invalid_challenge_definition"
    message = "Challenge definition is invalid"


class InvalidProgressData(EngagementError):
    code = "invalid_progress_data"
    message = "Progress data is invalid"


def is_unique_violation(exc: Exception, constraint: str | None = None) -> bool:
    """
    Check whether a store error is a unique-constraint violation.

    Args:
        exc: Exception raised by the session
        constraint: Optional constraint/column name that must appear in the
            driver message

    Returns:
        True if exc is an IntegrityError for a unique constraint
    """
    if not isinstance(exc, IntegrityError):
        return False

    text = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
    if "unique" not in text and "duplicate" not in text:
        return False
    return constraint is None or constraint.lower() in text
