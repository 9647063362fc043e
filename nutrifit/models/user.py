"""
UserAccount model.

Mirror of the auth provider's user record with wallet credit totals.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from nutrifit.models.base import Base
from nutrifit.models.types import MoneyType


class UserAccount(Base):
    """Registered app user."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "credit_balance >= 0", name="check_user_credit_balance_non_negative"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    display_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Wallet credits
    credit_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    referral_credits_earned: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0"),
        nullable=False,
        comment="Lifetime credits earned as a referrer",
    )

    def __repr__(self) -> str:
        return f"<UserAccount(id={self.id}, display_name={self.display_name!r})>"
