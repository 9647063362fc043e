"""
Referral service.

Issues referral codes, redeems them at signup and rewards both parties on the
referee's first purchase.
"""

import uuid
from datetime import timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nutrifit.config.business_constants import (
    BASE_REFEREE_REWARD,
    BASE_REFERRER_REWARD,
    CREDIT_REASON_REFEREE_REWARD,
    CREDIT_REASON_REFERRER_REWARD,
    REFERRAL_CODE_MAX_ATTEMPTS,
    REFERRAL_EXPIRY_DAYS,
)
from nutrifit.models.enums import (
    ReferralInteraction,
    ReferralMethod,
    ReferralSource,
    ReferralStatus,
)
from nutrifit.models.referral import Referral
from nutrifit.repositories.referral_repository import ReferralRepository
from nutrifit.services.base_service import BaseService
from nutrifit.services.referral.code_generator import (
    make_referral_code,
    normalize_code,
)
from nutrifit.services.referral.schemas import ReferralReward
from nutrifit.services.reward_rules import bonus_tier_for_count
from nutrifit.services.side_effects import (
    REFERRAL_MILESTONE_TEMPLATE,
    SideEffectService,
)
from nutrifit.utils.datetime_utils import utc_now
from nutrifit.utils.exceptions import (
    CodeGenerationExhausted,
    InvalidOrExpiredCode,
    SelfReferral,
    Unauthenticated,
    is_unique_violation,
)


CENTS = Decimal("0.01")


class ReferralService(BaseService):
    """
    Referral service.

    All methods are request-scoped; the service holds no state besides the
    session it was built with.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral service."""
        super().__init__(session)
        self.referral_repo = ReferralRepository(session)
        self.side_effects = SideEffectService(session)

    async def generate_code(self) -> str:
        """
        Generate a referral code not used by any referral.

        Returns:
            8-character code from [A-Z0-9]

        Raises:
            CodeGenerationExhausted: After REFERRAL_CODE_MAX_ATTEMPTS collisions
        """
        for attempt in range(1, REFERRAL_CODE_MAX_ATTEMPTS + 1):
            code = make_referral_code()
            if not await self.referral_repo.code_exists(code):
                return code

            self.logger.debug(
                "Referral code collision",
                extra={"attempt": attempt},
            )

        raise CodeGenerationExhausted()

    async def calculate_bonus_tier(self, user_id: uuid.UUID) -> Decimal:
        """
        Bonus multiplier from the user's successful referral count.

        Args:
            user_id: Referrer user ID

        Returns:
            1.0, 1.2, 1.5 or 2.0
        """
        successful = await self.referral_repo.count_successful(user_id)
        return bonus_tier_for_count(successful)

    async def create_referral(
        self,
        requester_id: uuid.UUID | None,
        method: ReferralMethod,
        source: ReferralSource,
        metadata: dict[str, Any] | None = None,
    ) -> Referral:
        """
        Issue a new pending referral for the requester.

        Store lookups that find the code taken and unique violations on
        insert share one budget of REFERRAL_CODE_MAX_ATTEMPTS draws.

        Args:
            requester_id: Authenticated user ID, or None
            method: How the invitation is delivered
            source: Channel it is shared through
            metadata: Optional free-form metadata

        Returns:
            Created referral

        Raises:
            Unauthenticated: If requester_id is None
            CodeGenerationExhausted: If no unique code could be allocated
        """
        if requester_id is None:
            raise Unauthenticated()

        bonus_tier = await self.calculate_bonus_tier(requester_id)

        for attempt in range(1, REFERRAL_CODE_MAX_ATTEMPTS + 1):
            code = make_referral_code()
            if await self.referral_repo.code_exists(code):
                self.logger.debug(
                    "Referral code collision",
                    extra={"attempt": attempt},
                )
                continue

            try:
                async with self.session.begin_nested():
                    referral = await self.referral_repo.create(
                        referrer_id=requester_id,
                        code=code,
                        method=ReferralMethod(method).value,
                        source=ReferralSource(source).value,
                        status=ReferralStatus.PENDING.value,
                        bonus_tier=bonus_tier,
                        extra=metadata or {},
                    )
            except IntegrityError as e:
                if not is_unique_violation(e, "code"):
                    raise
                self.logger.warning(
                    "Referral code taken concurrently, retrying",
                    extra={"attempt": attempt},
                )
                continue

            await self.commit()

            self.logger.info(
                "Referral created",
                extra={
                    "referral_id": str(referral.id),
                    "referrer_id": str(requester_id),
                    "bonus_tier": str(bonus_tier),
                    "method": referral.method,
                    "source": referral.source,
                },
            )
            return referral

        raise CodeGenerationExhausted()

    async def validate_referral_code(
        self, code: str, candidate_user_id: uuid.UUID
    ) -> Referral:
        """
        Redeem a referral code for a newly signed-up user.

        Args:
            code: Code entered by the user (any case)
            candidate_user_id: The new user's ID

        Returns:
            Redeemed referral

        Raises:
            InvalidOrExpiredCode: No pending unredeemed referral has the code,
                or a concurrent redemption claimed it first
            SelfReferral: The candidate issued the code
        """
        referral = await self.referral_repo.get_redeemable(normalize_code(code))
        if referral is None:
            raise InvalidOrExpiredCode()

        if referral.referrer_id == candidate_user_id:
            raise SelfReferral()

        signed_up_at = utc_now()
        redeemed = await self.referral_repo.redeem(
            referral.id, candidate_user_id, signed_up_at
        )
        if not redeemed:
            await self.rollback()
            self.logger.warning(
                "Referral redeemed concurrently",
                extra={"referral_id": str(referral.id)},
            )
            raise InvalidOrExpiredCode()

        await self.commit()

        referral.referee_id = candidate_user_id
        referral.signed_up_at = signed_up_at

        self.logger.info(
            "Referral code redeemed",
            extra={
                "referral_id": str(referral.id),
                "referrer_id": str(referral.referrer_id),
                "referee_id": str(candidate_user_id),
            },
        )
        return referral

    async def process_first_purchase(
        self, user_id: uuid.UUID
    ) -> ReferralReward | None:
        """
        Reward referrer and referee on the referee's first purchase.

        The referral flips to earned first; wallet credits and the milestone
        achievement are queued in the same transaction and applied
        best-effort afterwards, so a crediting failure never undoes the
        purchase or the status change. Calling it again for the same user is
        a no-op because the referral is no longer pending.

        Args:
            user_id: Referee who completed a purchase

        Returns:
            Reward breakdown, or None when there is no pending referral
        """
        referral = await self.referral_repo.get_pending_for_referee(user_id)
        if referral is None:
            return None

        bonus_tier = Decimal(referral.bonus_tier)
        reward = ReferralReward(
            referrer_reward=(BASE_REFERRER_REWARD * bonus_tier).quantize(CENTS),
            referee_reward=BASE_REFEREE_REWARD,
            bonus_multiplier=bonus_tier,
        )

        earned = await self.referral_repo.mark_earned(
            referral.id, reward.referrer_reward, utc_now()
        )
        if not earned:
            await self.rollback()
            self.logger.info(
                "Referral already processed",
                extra={"referral_id": str(referral.id)},
            )
            return None

        effects = [
            await self.side_effects.enqueue_credit(
                referral.referrer_id,
                reward.referrer_reward,
                CREDIT_REASON_REFERRER_REWARD,
                reference_id=referral.id,
                track_referral_earnings=True,
            ),
            await self.side_effects.enqueue_credit(
                user_id,
                reward.referee_reward,
                CREDIT_REASON_REFEREE_REWARD,
                reference_id=referral.id,
            ),
            await self.side_effects.enqueue_achievement(
                referral.referrer_id,
                template=REFERRAL_MILESTONE_TEMPLATE,
                related_entity_id=str(referral.id),
            ),
        ]
        await self.commit()

        self.logger.info(
            "Referral earned",
            extra={
                "referral_id": str(referral.id),
                "referrer_id": str(referral.referrer_id),
                "referee_id": str(user_id),
                "referrer_reward": str(reward.referrer_reward),
                "referee_reward": str(reward.referee_reward),
                "bonus_multiplier": str(bonus_tier),
            },
        )

        await self.side_effects.dispatch_all(effects)

        return reward

    async def expire_old_referrals(self) -> int:
        """
        Expire pending referrals nobody redeemed within the expiry window.

        Housekeeping: errors are logged and reported as 0 expired.

        Returns:
            Number of referrals expired
        """
        cutoff = utc_now() - timedelta(days=REFERRAL_EXPIRY_DAYS)

        try:
            expired = await self.referral_repo.expire_unredeemed_before(cutoff)
            await self.commit()
        except Exception as e:
            await self.rollback()
            self.logger.error(
                "Failed to expire old referrals",
                extra={"cutoff": cutoff.isoformat(), "error": str(e)},
            )
            return 0

        if expired:
            self.logger.info(
                f"Expired {expired} unredeemed referrals",
                extra={"cutoff": cutoff.isoformat()},
            )
        return expired

    async def get_user_referrals(
        self,
        requester_id: uuid.UUID | None,
        status: ReferralStatus | None = None,
    ) -> list[Referral]:
        """
        Referrals issued by the requester, newest first.

        Raises:
            Unauthenticated: If requester_id is None
        """
        if requester_id is None:
            raise Unauthenticated()

        return await self.referral_repo.get_by_referrer(
            requester_id, status.value if status else None
        )

    async def get_active_referral_code(
        self, requester_id: uuid.UUID | None
    ) -> str | None:
        """Newest pending code of the requester, or None."""
        if requester_id is None:
            return None
        return await self.referral_repo.get_latest_pending_code(requester_id)

    async def is_referral_code_available(self, code: str) -> bool:
        """True when no referral uses the code."""
        return not await self.referral_repo.code_exists(normalize_code(code))

    async def get_referral_by_code(self, code: str) -> Referral | None:
        """Look up a referral by code regardless of status."""
        return await self.referral_repo.get_by_code(normalize_code(code))

    async def track_referral_interaction(
        self, code: str, interaction: ReferralInteraction
    ) -> None:
        """
        Append an interaction to the referral's metadata log.

        Analytics only: failures are logged, not raised.
        """
        try:
            referral = await self.referral_repo.get_by_code(normalize_code(code))
            if referral is None:
                self.logger.debug(
                    "Interaction for unknown referral code",
                    extra={"interaction": interaction.value},
                )
                return

            extra = dict(referral.extra or {})
            interactions = list(extra.get("interactions", []))
            interactions.append(
                {"type": interaction.value, "at": utc_now().isoformat()}
            )
            extra["interactions"] = interactions

            await self.referral_repo.update(referral.id, extra=extra)
            await self.commit()
        except Exception as e:
            await self.rollback()
            self.logger.error(
                "Failed to track referral interaction",
                extra={"interaction": interaction.value, "error": str(e)},
            )
