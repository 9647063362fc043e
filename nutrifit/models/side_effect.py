"""
PendingSideEffect model.

Queue of best-effort effects (wallet credits, achievements) recorded in the
same transaction as the state change that caused them and applied
independently, so failures stay visible and retryable.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from nutrifit.models.base import Base
from nutrifit.models.enums import SideEffectStatus


class PendingSideEffect(Base):
    """
    Queued side effect.

    Attributes:
        kind: SideEffectKind value selecting the handler
        user_id: User the effect applies to
        payload: Handler arguments (amounts as strings)
        status: pending -> done | failed
        attempts: Dispatch attempts so far
        last_error: Error message of the latest failed attempt
    """

    __tablename__ = "pending_side_effects"
    __table_args__ = (
        Index("idx_side_effects_status_created", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    kind: Mapped[str] = mapped_column(String(30), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    status: Mapped[str] = mapped_column(
        String(20), default=SideEffectStatus.PENDING.value, nullable=False
    )
    attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<PendingSideEffect(id={self.id}, kind={self.kind!r}, "
            f"status={self.status!r}, attempts={self.attempts})>"
        )
