"""
SocialAchievement model.

Public achievement entries created for referral milestones and challenge
completions.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from nutrifit.models.base import Base


class SocialAchievement(Base):
    """Achievement awarded to a user."""

    __tablename__ = "social_achievements"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    achievement_type: Mapped[str] = mapped_column(String(40), nullable=False)
    achievement_name: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    related_entity_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, nullable=True
    )
    related_entity_type: Mapped[str | None] = mapped_column(
        String(40), nullable=True
    )
    points_awarded: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    badge_awarded: Mapped[str | None] = mapped_column(
        String(120), nullable=True
    )
    special_reward: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<SocialAchievement(user_id={self.user_id}, "
            f"name={self.achievement_name!r})>"
        )
