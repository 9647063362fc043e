"""End-to-end engagement flows over the in-memory store."""

from datetime import timedelta
from decimal import Decimal

import pytest

from nutrifit.models import Referral
from nutrifit.models.enums import (
    ChallengeType,
    ReferralMethod,
    ReferralSource,
    ReferralStatus,
)
from nutrifit.services.challenge import ChallengeService, ProgressEntry
from nutrifit.services.referral import ReferralService
from nutrifit.utils.datetime_utils import utc_now
from nutrifit.utils.exceptions import ChallengeFull


class TestReferralFlow:
    """Referral lifecycle from issue to reward."""

    @pytest.mark.asyncio
    async def test_create_redeem_purchase(self, fake_session, store):
        """Test referral becomes earned with reward 10.00 * tier."""
        referrer = store.add_user(display_name="Ana")
        redeemer = store.add_user(display_name="Ben")
        service = ReferralService(fake_session)

        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.APP_SHARE
        )
        await service.validate_referral_code(referral.code, redeemer.id)
        reward = await service.process_first_purchase(redeemer.id)

        assert referral.status == ReferralStatus.EARNED.value
        assert referral.reward_amount == Decimal("10.00") * referral.bonus_tier
        assert reward.bonus_multiplier == referral.bonus_tier

    @pytest.mark.asyncio
    async def test_reward_uses_tier_at_creation(self, fake_session, store):
        """Test a referrer with ten successes earns 15.00."""
        referrer = store.add_user()
        redeemer = store.add_user()
        for i in range(10):
            store.add(
                Referral(
                    referrer_id=referrer.id,
                    code=f"PAST{i:04d}",
                    method="code",
                    source="sms",
                    status=ReferralStatus.CREDITED.value,
                )
            )
        service = ReferralService(fake_session)

        referral = await service.create_referral(
            referrer.id, ReferralMethod.LINK, ReferralSource.SOCIAL
        )
        await service.validate_referral_code(referral.code, redeemer.id)
        reward = await service.process_first_purchase(redeemer.id)

        assert reward.referrer_reward == Decimal("15.00")
        assert referrer.credit_balance == Decimal("15.00")
        assert redeemer.credit_balance == Decimal("5.00")


class TestChallengeFlow:
    """Challenge lifecycle from join to completion."""

    @pytest.mark.asyncio
    async def test_capacity_one(self, fake_session, store):
        """Test the second user cannot join a full challenge."""
        challenge = store.add_challenge(
            name="Solo Sprint",
            challenge_type=ChallengeType.GOAL_BASED.value,
            duration_days=3,
            max_participants=1,
            success_criteria={"target_score": 10},
            reward_structure={},
            start_date=utc_now(),
            end_date=utc_now() + timedelta(days=3),
        )
        first, second = store.add_user(), store.add_user()
        service = ChallengeService(fake_session)

        await service.join_challenge(first.id, challenge.id)

        with pytest.raises(ChallengeFull):
            await service.join_challenge(second.id, challenge.id)

    @pytest.mark.asyncio
    async def test_progress_to_completion(self, fake_session, store):
        """Test logged progress completes the participant and pays out."""
        challenge = store.add_challenge(
            name="Fruit Goal",
            challenge_type=ChallengeType.GOAL_BASED.value,
            duration_days=7,
            success_criteria={"target_score": 25},
            reward_structure={"credits": 2, "badges": ["goal_getter"]},
            start_date=utc_now(),
            end_date=utc_now() + timedelta(days=7),
        )
        user = store.add_user()
        service = ChallengeService(fake_session)

        await service.join_challenge(user.id, challenge.id)
        await service.add_progress(
            user.id,
            challenge.id,
            ProgressEntry(daily_score=30, progress_data={"fruits": ["apple"]}),
        )

        assert await service.check_challenge_completion(challenge.id) == 1

        participation = await service.get_user_participation(user.id, challenge.id)
        stats = await service.get_challenge_stats(challenge.id, user.id)
        assert participation.status == "completed"
        assert participation.final_score == 30
        assert user.credit_balance == Decimal("2")
        assert stats.completion_rate == 100
        assert stats.user_rank == 1
        assert await service.check_challenge_completion(challenge.id) == 0
