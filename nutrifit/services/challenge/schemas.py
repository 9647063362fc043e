"""
Challenge request and result types.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
import uuid

from pydantic import BaseModel, Field, model_validator

from nutrifit.config.business_constants import (
    MAX_DIFFICULTY_LEVEL,
    MIN_DIFFICULTY_LEVEL,
)
from nutrifit.models.challenge import ChallengeParticipant, CommunityChallenge
from nutrifit.models.enums import ChallengeType


class ProgressEntry(BaseModel):
    """One day of progress submitted by a participant."""

    progress_data: dict[str, Any] = Field(default_factory=dict)
    daily_score: int = Field(ge=0)
    notes: str | None = None


class ChallengeDefinition(BaseModel):
    """Data for creating a community challenge."""

    name: str = Field(min_length=1, max_length=120)
    description: str = ""
    challenge_type: ChallengeType
    difficulty_level: int = Field(
        default=MIN_DIFFICULTY_LEVEL,
        ge=MIN_DIFFICULTY_LEVEL,
        le=MAX_DIFFICULTY_LEVEL,
    )
    duration_days: int = Field(gt=0)
    max_participants: int | None = Field(default=None, gt=0)
    entry_requirements: dict[str, Any] | None = None
    success_criteria: dict[str, Any] = Field(default_factory=dict)
    reward_structure: dict[str, Any] = Field(default_factory=dict)
    start_date: datetime
    end_date: datetime
    is_public: bool = True

    @model_validator(mode="after")
    def check_dates(self) -> "ChallengeDefinition":
        """End date must follow start date."""
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


@dataclass
class ChallengeStats:
    """Aggregate statistics of one challenge."""

    total_participants: int = 0
    active_participants: int = 0
    completed_participants: int = 0
    average_score: float = 0.0
    completion_rate: float = 0.0
    days_remaining: int = 0
    user_rank: int | None = None
    user_score: int | None = None


@dataclass(frozen=True)
class LeaderboardEntry:
    """A visible participant's leaderboard position."""

    challenge_id: uuid.UUID
    challenge_name: str
    user_id: uuid.UUID
    final_score: int
    current_rank: int
    completion_status: str
    challenge_active: bool
    joined_at: datetime
    completion_date: datetime | None = None


@dataclass(frozen=True)
class ActiveChallenge:
    """A challenge the user is currently taking part in."""

    challenge: CommunityChallenge
    participation: ChallengeParticipant
