"""
Referral model.

One invitation issued by a referrer, identified by a unique 8-character code.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from nutrifit.models.base import Base
from nutrifit.models.enums import ReferralStatus
from nutrifit.models.types import MoneyType, MultiplierType


class Referral(Base):
    """
    Referral entity.

    Lifecycle:
        pending -> earned (first purchase of the referee)
        pending -> expired (unredeemed after the expiry window)
        earned -> credited (reconciliation, outside this package)

    Attributes:
        id: Primary key
        referrer_id: User who issued the code
        referee_id: User who redeemed the code (set on redemption)
        code: Unique 8-character code from [A-Z0-9]
        method: How the invitation was delivered
        source: Channel it was shared through
        invited_at: Creation time
        signed_up_at: Redemption time
        first_purchase_at: Time the referee's first purchase completed
        status: Reward status
        reward_amount: Referrer reward once earned
        bonus_tier: Multiplier captured at creation time
        extra: Free-form metadata (interaction log, campaign tags)
    """

    __tablename__ = "referrals"
    __table_args__ = (
        CheckConstraint(
            "referee_id IS NULL OR referee_id <> referrer_id",
            name="check_referral_not_self",
        ),
        Index("idx_referrals_referrer_status", "referrer_id", "status"),
        Index("idx_referrals_referee_status", "referee_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    referrer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    referee_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    code: Mapped[str] = mapped_column(
        String(8), unique=True, index=True, nullable=False
    )
    method: Mapped[str] = mapped_column(String(20), nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False)

    invited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    signed_up_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    first_purchase_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=ReferralStatus.PENDING.value,
        nullable=False,
    )
    reward_amount: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    bonus_tier: Mapped[Decimal] = mapped_column(
        MultiplierType, default=Decimal("1.0"), nullable=False
    )
    extra: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, default=dict, nullable=False
    )

    @property
    def is_redeemed(self) -> bool:
        return self.referee_id is not None

    def __repr__(self) -> str:
        return (
            f"<Referral(id={self.id}, code={self.code!r}, "
            f"status={self.status!r})>"
        )
