"""
Side effect queue.

Best-effort effects (wallet credits, achievements) are recorded as
PendingSideEffect rows in the same transaction as the state change that
caused them, then dispatched one by one inside savepoints. A failed dispatch
is logged and left pending for the retry job; it never fails the caller.
"""

import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.config.settings import settings
from nutrifit.models.enums import SideEffectKind, SideEffectStatus
from nutrifit.models.side_effect import PendingSideEffect
from nutrifit.repositories.achievement_repository import AchievementRepository
from nutrifit.repositories.referral_repository import ReferralRepository
from nutrifit.repositories.side_effect_repository import SideEffectRepository
from nutrifit.services.base_service import BaseService
from nutrifit.services.credit_ledger import CreditLedger
from nutrifit.services.reward_rules import referral_milestone_for_count
from nutrifit.utils.datetime_utils import utc_now


# Achievement payload template resolved at dispatch time
REFERRAL_MILESTONE_TEMPLATE = "referral_milestone"

MAX_ERROR_LENGTH = 500


def _optional_uuid(value: str | None) -> uuid.UUID | None:
    return uuid.UUID(value) if value else None


class SideEffectService(BaseService):
    """Records and applies best-effort side effects."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize side effect service."""
        super().__init__(session)
        self.effect_repo = SideEffectRepository(session)
        self.achievement_repo = AchievementRepository(session)
        self.referral_repo = ReferralRepository(session)
        self.ledger = CreditLedger(session)

    async def enqueue(
        self,
        kind: SideEffectKind,
        user_id: uuid.UUID,
        payload: dict[str, Any],
    ) -> PendingSideEffect:
        """
        Record a pending effect in the caller's transaction.

        Args:
            kind: Effect handler
            user_id: User the effect applies to
            payload: JSON-serialisable handler arguments

        Returns:
            Pending effect row
        """
        return await self.effect_repo.create(
            kind=kind.value,
            user_id=user_id,
            payload=payload,
            status=SideEffectStatus.PENDING.value,
            attempts=0,
        )

    async def enqueue_credit(
        self,
        user_id: uuid.UUID,
        amount: Decimal,
        reason: str,
        reference_id: uuid.UUID | None = None,
        track_referral_earnings: bool = False,
    ) -> PendingSideEffect:
        """Record a pending wallet credit."""
        kind = (
            SideEffectKind.REFERRAL_CREDIT
            if track_referral_earnings
            else SideEffectKind.CREDIT
        )
        return await self.enqueue(
            kind,
            user_id,
            {
                "amount": str(amount),
                "reason": reason,
                "reference_id": str(reference_id) if reference_id else None,
            },
        )

    async def enqueue_achievement(
        self, user_id: uuid.UUID, **fields: Any
    ) -> PendingSideEffect:
        """Record a pending achievement (SocialAchievement column values)."""
        return await self.enqueue(SideEffectKind.ACHIEVEMENT, user_id, fields)

    async def dispatch(self, effect: PendingSideEffect) -> bool:
        """
        Apply one effect inside a savepoint.

        Args:
            effect: Pending effect

        Returns:
            True if applied, False if it failed (logged, left for retry)
        """
        effect.attempts += 1

        try:
            async with self.session.begin_nested():
                await self._apply(effect)
        except Exception as e:
            effect.last_error = str(e)[:MAX_ERROR_LENGTH]
            if effect.attempts >= settings.side_effect_max_attempts:
                effect.status = SideEffectStatus.FAILED.value
                effect.processed_at = utc_now()

            self.logger.error(
                "Side effect dispatch failed",
                extra={
                    "effect_id": str(effect.id),
                    "kind": effect.kind,
                    "user_id": str(effect.user_id),
                    "attempts": effect.attempts,
                    "status": effect.status,
                    "error": str(e),
                },
            )
            return False

        effect.status = SideEffectStatus.DONE.value
        effect.processed_at = utc_now()
        return True

    async def dispatch_all(self, effects: list[PendingSideEffect]) -> int:
        """
        Dispatch effects in order and commit the outcome.

        Returns:
            Number of effects applied
        """
        applied = 0
        for effect in effects:
            if await self.dispatch(effect):
                applied += 1

        await self.commit()

        if applied < len(effects):
            self.logger.warning(
                "Some side effects left for retry",
                extra={"applied": applied, "total": len(effects)},
            )
        return applied

    async def process_pending(self, limit: int | None = None) -> dict[str, int]:
        """
        Retry a batch of pending effects.

        Args:
            limit: Batch size (defaults to settings.side_effect_batch_size)

        Returns:
            Dict with processed and applied counts
        """
        effects = await self.effect_repo.get_pending(
            limit or settings.side_effect_batch_size
        )
        if not effects:
            return {"processed": 0, "applied": 0}

        applied = await self.dispatch_all(effects)

        self.logger.info(
            "Pending side effects processed",
            extra={"processed": len(effects), "applied": applied},
        )
        return {"processed": len(effects), "applied": applied}

    async def _apply(self, effect: PendingSideEffect) -> None:
        """Run the handler for the effect kind."""
        kind = SideEffectKind(effect.kind)
        payload = effect.payload or {}

        if kind in (SideEffectKind.CREDIT, SideEffectKind.REFERRAL_CREDIT):
            amount = Decimal(payload["amount"])
            await self.ledger.credit(
                effect.user_id,
                amount,
                payload["reason"],
                _optional_uuid(payload.get("reference_id")),
            )
            if kind is SideEffectKind.REFERRAL_CREDIT:
                await self.ledger.record_referral_earnings(
                    effect.user_id, amount
                )
        elif kind is SideEffectKind.ACHIEVEMENT:
            await self._create_achievement(effect.user_id, payload)

    async def _create_achievement(
        self, user_id: uuid.UUID, payload: dict[str, Any]
    ) -> None:
        fields = dict(payload)

        if fields.pop("template", None) == REFERRAL_MILESTONE_TEMPLATE:
            count = await self.referral_repo.count_successful(user_id)
            milestone = referral_milestone_for_count(count)
            fields.update(
                achievement_type=REFERRAL_MILESTONE_TEMPLATE,
                achievement_name=milestone.name,
                description=(
                    f"Successfully referred {count} friends to DailyNutriFit"
                ),
                related_entity_type="referral",
                points_awarded=milestone.points,
                badge_awarded=milestone.badge,
            )

        fields["related_entity_id"] = _optional_uuid(
            fields.get("related_entity_id")
        )
        fields.setdefault("is_public", True)

        await self.achievement_repo.create(user_id=user_id, **fields)
