"""
Challenge payload models and success-criteria evaluation.

success_criteria, progress_data, reward_structure and entry_requirements are
stored as JSON. They are parsed here into typed models keyed by challenge
type, so evaluation is exhaustive over ChallengeType.
"""

from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nutrifit.models.enums import ChallengeType
from nutrifit.utils.exceptions import (
    EngagementError,
    InvalidChallengeDefinition,
    InvalidProgressData,
)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow")


class ConsistencyCriteria(_Payload):
    """Log progress on N consecutive calendar days."""

    consecutive_days: int | None = Field(default=None, ge=1)


class VarietyCriteria(_Payload):
    """Eat N distinct fruits over the challenge."""

    unique_fruits: int | None = Field(default=None, ge=1)


class GoalCriteria(_Payload):
    """Reach a total score."""

    target_score: int | None = Field(default=None, ge=1)


class SeasonalCriteria(_Payload):
    """Product-defined seasonal rules; not evaluated yet."""


SuccessCriteria = ConsistencyCriteria | VarietyCriteria | GoalCriteria | SeasonalCriteria

CRITERIA_MODELS: dict[ChallengeType, type[_Payload]] = {
    ChallengeType.CONSISTENCY: ConsistencyCriteria,
    ChallengeType.VARIETY: VarietyCriteria,
    ChallengeType.GOAL_BASED: GoalCriteria,
    ChallengeType.SEASONAL: SeasonalCriteria,
}


class ProgressPayload(_Payload):
    """Daily progress data; fruits feed the variety criteria."""

    fruits: list[str | int] = Field(default_factory=list)


class RewardStructure(_Payload):
    """Rewards granted on completion."""

    credits: Decimal | None = Field(default=None, ge=0)
    completion_points: int = Field(default=0, ge=0)
    badges: list[str] = Field(default_factory=list)
    bonus_items: Any = None


class EntryRequirements(_Payload):
    """Conditions a user must meet to join."""

    account_age_days: int | None = Field(default=None, ge=0)
    # Accepted for compatibility; delivery history is not tracked here
    min_deliveries: int | None = Field(default=None, ge=0)


class ProgressRecord(Protocol):
    """Fields of a progress entry used by the evaluation."""

    progress_date: date
    progress_data: Mapping[str, Any] | None
    daily_score: int


def _parse(
    model: type[_Payload],
    raw: Any,
    what: str,
    error: type[EngagementError] = InvalidChallengeDefinition,
) -> Any:
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw or {})
    except ValidationError as e:
        raise error(f"Invalid {what}: {e.errors()}") from e


def parse_success_criteria(
    challenge_type: ChallengeType | str, raw: Any
) -> SuccessCriteria:
    """
    Parse raw success criteria into the model of the challenge type.

    Raises:
        InvalidChallengeDefinition: Unknown type or malformed criteria
    """
    try:
        challenge_type = ChallengeType(challenge_type)
    except ValueError as e:
        raise InvalidChallengeDefinition(
            f"Unknown challenge type: {challenge_type!r}"
        ) from e
    return _parse(CRITERIA_MODELS[challenge_type], raw, "success criteria")


def parse_reward_structure(raw: Any) -> RewardStructure:
    return _parse(RewardStructure, raw, "reward structure")


def parse_entry_requirements(raw: Any) -> EntryRequirements:
    return _parse(EntryRequirements, raw, "entry requirements")


def parse_progress_payload(raw: Any) -> ProgressPayload:
    """
    Parse one day of progress data.

    Raises:
        InvalidProgressData: Malformed payload
    """
    return _parse(ProgressPayload, raw, "progress data", InvalidProgressData)


def longest_consecutive_streak(dates: Iterable[date]) -> int:
    """
    Longest run of consecutive calendar days.

    A gap of exactly one day extends the run; any other gap restarts it.
    Repeated dates are counted once.

    Args:
        dates: Progress dates in any order

    Returns:
        Length of the longest run (0 for no dates)
    """
    ordered = sorted(set(dates))
    if not ordered:
        return 0

    longest = current = 1
    for previous, day in zip(ordered, ordered[1:]):
        if (day - previous).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def distinct_fruits(history: Iterable[ProgressRecord]) -> set[str | int]:
    """Union of fruit identifiers across progress entries."""
    fruits: set[str | int] = set()
    for entry in history:
        fruits.update(parse_progress_payload(entry.progress_data).fruits)
    return fruits


def evaluate_success_criteria(
    criteria: Any,
    progress_history: Iterable[ProgressRecord],
    challenge_type: ChallengeType | str,
) -> bool:
    """
    Decide whether a participant's progress meets the challenge criteria.

    Args:
        criteria: Raw criteria dict or parsed criteria model
        progress_history: The participant's progress entries
        challenge_type: Type selecting the rule

    Returns:
        True if the criteria are met. Criteria without a threshold and
        seasonal challenges are never met.
    """
    parsed = parse_success_criteria(challenge_type, criteria)
    history = list(progress_history)

    if isinstance(parsed, ConsistencyCriteria):
        if parsed.consecutive_days is None:
            return False
        streak = longest_consecutive_streak(e.progress_date for e in history)
        return streak >= parsed.consecutive_days

    if isinstance(parsed, VarietyCriteria):
        if parsed.unique_fruits is None:
            return False
        return len(distinct_fruits(history)) >= parsed.unique_fruits

    if isinstance(parsed, GoalCriteria):
        if parsed.target_score is None:
            return False
        return sum(e.daily_score for e in history) >= parsed.target_score

    # Seasonal: no product-defined criteria yet
    return False
