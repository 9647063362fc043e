"""
Credit transaction repository.

Data access layer for CreditTransaction model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.models.credit_transaction import CreditTransaction
from nutrifit.repositories.base import BaseRepository


class CreditTransactionRepository(BaseRepository[CreditTransaction]):
    """Ledger rows repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize credit transaction repository."""
        super().__init__(CreditTransaction, session)
