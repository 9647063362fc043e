"""
Community challenge models.

CommunityChallenge: challenge definition.
ChallengeParticipant: a user's enrollment in one challenge.
ChallengeProgress: one daily progress entry of a participant.
"""

import uuid
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nutrifit.models.base import Base
from nutrifit.models.enums import ParticipationStatus


class CommunityChallenge(Base):
    """
    Community challenge definition.

    success_criteria, reward_structure and entry_requirements are stored as
    JSON and parsed into typed models by the challenge services.
    """

    __tablename__ = "community_challenges"
    __table_args__ = (
        CheckConstraint(
            "difficulty_level BETWEEN 1 AND 5",
            name="check_challenge_difficulty_range",
        ),
        CheckConstraint(
            "duration_days > 0", name="check_challenge_duration_positive"
        ),
        Index(
            "idx_challenges_public_active_priority",
            "is_public",
            "is_active",
            "featured_priority",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    challenge_type: Mapped[str] = mapped_column(String(20), nullable=False)
    difficulty_level: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1
    )
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    max_participants: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )

    entry_requirements: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    success_criteria: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    reward_structure: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )

    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    featured_priority: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    participants: Mapped[list["ChallengeParticipant"]] = relationship(
        back_populates="challenge", lazy="raise"
    )

    def __repr__(self) -> str:
        return (
            f"<CommunityChallenge(id={self.id}, name={self.name!r}, "
            f"type={self.challenge_type!r})>"
        )


class ChallengeParticipant(Base):
    """
    Challenge participation.

    One row per (challenge_id, user_id). final_score mirrors the cumulative
    score of the latest progress entry.
    """

    __tablename__ = "challenge_participants"
    __table_args__ = (
        UniqueConstraint(
            "challenge_id", "user_id", name="uq_participant_challenge_user"
        ),
        CheckConstraint(
            "final_score >= 0", name="check_participant_score_non_negative"
        ),
        Index(
            "idx_participants_challenge_score", "challenge_id", "final_score"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    challenge_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("community_challenges.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), default=ParticipationStatus.ACTIVE.value, nullable=False
    )
    completion_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    final_score: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    rank_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rewards_earned: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    is_visible: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    challenge: Mapped[CommunityChallenge] = relationship(
        back_populates="participants", lazy="raise"
    )

    @property
    def is_active(self) -> bool:
        return self.status == ParticipationStatus.ACTIVE.value

    def __repr__(self) -> str:
        return (
            f"<ChallengeParticipant(id={self.id}, user_id={self.user_id}, "
            f"status={self.status!r}, final_score={self.final_score})>"
        )


class ChallengeProgress(Base):
    """
    Daily progress entry.

    At most one row per participant per calendar date. cumulative_score is
    the previous entry's cumulative_score plus daily_score.
    """

    __tablename__ = "challenge_progress"
    __table_args__ = (
        UniqueConstraint(
            "participant_id", "progress_date", name="uq_progress_participant_date"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    participant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("challenge_participants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    progress_date: Mapped[date] = mapped_column(Date, nullable=False)
    progress_data: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    daily_score: Mapped[int] = mapped_column(Integer, nullable=False)
    cumulative_score: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    auto_generated: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<ChallengeProgress(participant_id={self.participant_id}, "
            f"date={self.progress_date}, cumulative={self.cumulative_score})>"
        )
