"""
Credit ledger.

Applies wallet credits: atomic balance increment plus a ledger row.
"""

import uuid
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.credit_transaction import CreditTransaction
from nutrifit.repositories.credit_transaction_repository import (
    CreditTransactionRepository,
)
from nutrifit.repositories.user_repository import UserRepository
from nutrifit.services.base_service import BaseService
from nutrifit.utils.exceptions import LedgerError


class CreditLedger(BaseService):
    """
    Wallet credit ledger.

    Does not commit; callers own the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize credit ledger."""
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = CreditTransactionRepository(session)

    async def credit(
        self,
        user_id: uuid.UUID,
        amount: Decimal,
        reason: str,
        reference_id: uuid.UUID | None = None,
    ) -> CreditTransaction:
        """
        Credit a user's wallet.

        Args:
            user_id: User receiving the credit
            amount: Positive amount
            reason: Ledger reason code
            reference_id: Referral or challenge the credit relates to

        Returns:
            Ledger row

        Raises:
            ValueError: If amount is not positive
            LedgerError: If the user does not exist
        """
        if amount <= 0:
            raise ValueError(f"Credit amount must be positive, got {amount}")

        updated = await self.user_repo.increment_credit_balance(user_id, amount)
        if not updated:
            raise LedgerError(f"User {user_id} not found for credit")

        entry = await self.transaction_repo.create(
            user_id=user_id,
            amount=amount,
            reason=reason,
            reference_id=reference_id,
        )

        self.logger.info(
            "Wallet credited",
            extra={
                "user_id": str(user_id),
                "amount": str(amount),
                "reason": reason,
                "reference_id": str(reference_id) if reference_id else None,
            },
        )
        return entry

    async def record_referral_earnings(
        self, user_id: uuid.UUID, amount: Decimal
    ) -> None:
        """
        Add to a referrer's lifetime referral earnings.

        Raises:
            LedgerError: If the user does not exist
        """
        updated = await self.user_repo.increment_referral_earnings(
            user_id, amount
        )
        if not updated:
            raise LedgerError(f"User {user_id} not found for referral earnings")
