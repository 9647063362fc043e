"""
Unit tests for ReferralService.

Runs against the in-memory repositories.
"""

import uuid
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from nutrifit.models import Referral, SocialAchievement
from nutrifit.models.enums import (
    ReferralInteraction,
    ReferralMethod,
    ReferralSource,
    ReferralStatus,
)
from nutrifit.services.referral import ReferralService
from nutrifit.services.referral import referral_service as referral_module
from nutrifit.utils.datetime_utils import utc_now
from nutrifit.utils.exceptions import (
    CodeGenerationExhausted,
    InvalidOrExpiredCode,
    SelfReferral,
    Unauthenticated,
)


@pytest.fixture
def referrer(store):
    return store.add_user(display_name="Ana")


@pytest.fixture
def referee(store):
    return store.add_user(display_name="Ben")


@pytest.fixture
def service(fake_session):
    return ReferralService(fake_session)


def add_earned_referrals(store, referrer_id, count):
    for i in range(count):
        store.add(
            Referral(
                referrer_id=referrer_id,
                code=f"EARNED{i:02d}",
                method="code",
                source="sms",
                status=ReferralStatus.EARNED.value,
            )
        )


class TestCreateReferral:
    """Test referral issuing."""

    @pytest.mark.asyncio
    async def test_unauthenticated(self, service):
        """Test anonymous requester is rejected."""
        with pytest.raises(Unauthenticated):
            await service.create_referral(None, ReferralMethod.CODE, ReferralSource.SMS)

    @pytest.mark.asyncio
    async def test_creates_pending_referral(self, service, referrer, fake_session):
        """Test new referral is pending with the base tier."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.LINK, ReferralSource.EMAIL, {"campaign": "spring"}
        )

        assert referral.status == ReferralStatus.PENDING.value
        assert referral.referee_id is None
        assert referral.bonus_tier == Decimal("1.0")
        assert referral.method == "link"
        assert referral.extra == {"campaign": "spring"}
        assert len(referral.code) == 8
        assert fake_session.commits == 1

    @pytest.mark.asyncio
    async def test_tier_captured_at_creation(self, service, store, referrer):
        """Test five successful referrals raise the tier to 1.2."""
        add_earned_referrals(store, referrer.id, 5)

        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SOCIAL
        )

        assert referral.bonus_tier == Decimal("1.2")

    @pytest.mark.asyncio
    async def test_exhausted_after_ten_draws(
        self, service, store, referrer, monkeypatch
    ):
        """Test store collisions stop after ten draws in total."""
        store.add(
            Referral(
                referrer_id=referrer.id,
                code="TAKEN001",
                method="code",
                source="sms",
                status=ReferralStatus.PENDING.value,
            )
        )
        draws = []

        def taken_code():
            draws.append("TAKEN001")
            return "TAKEN001"

        monkeypatch.setattr(referral_module, "make_referral_code", taken_code)

        with pytest.raises(CodeGenerationExhausted):
            await service.create_referral(
                referrer.id, ReferralMethod.CODE, ReferralSource.SMS
            )

        assert len(draws) == 10

    @pytest.mark.asyncio
    async def test_insert_conflicts_share_the_budget(
        self, service, store, referrer, monkeypatch
    ):
        """Test unique violations on insert use up the same ten attempts."""
        store.add(
            Referral(
                referrer_id=referrer.id,
                code="TAKEN001",
                method="code",
                source="sms",
                status=ReferralStatus.PENDING.value,
            )
        )
        draws = []

        def taken_code():
            draws.append("TAKEN001")
            return "TAKEN001"

        monkeypatch.setattr(referral_module, "make_referral_code", taken_code)
        service.referral_repo.code_exists = AsyncMock(return_value=False)

        with pytest.raises(CodeGenerationExhausted):
            await service.create_referral(
                referrer.id, ReferralMethod.CODE, ReferralSource.SMS
            )

        assert len(draws) == 10
        assert len(store.all(Referral)) == 1


class TestValidateReferralCode:
    """Test code redemption."""

    @pytest.mark.asyncio
    async def test_unknown_code(self, service, referee):
        """Test unknown code is rejected."""
        with pytest.raises(InvalidOrExpiredCode):
            await service.validate_referral_code("NOPE1234", referee.id)

    @pytest.mark.asyncio
    async def test_self_referral(self, service, referrer):
        """Test referrer cannot redeem own code."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )

        with pytest.raises(SelfReferral):
            await service.validate_referral_code(referral.code, referrer.id)

    @pytest.mark.asyncio
    async def test_redeem_is_case_insensitive(self, service, referrer, referee):
        """Test lower-case input redeems the code."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )

        redeemed = await service.validate_referral_code(
            referral.code.lower(), referee.id
        )

        assert redeemed.referee_id == referee.id
        assert redeemed.signed_up_at is not None

    @pytest.mark.asyncio
    async def test_code_redeemed_once(self, service, store, referrer, referee):
        """Test a second redemption fails."""
        other = store.add_user()
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )
        await service.validate_referral_code(referral.code, referee.id)

        with pytest.raises(InvalidOrExpiredCode):
            await service.validate_referral_code(referral.code, other.id)

    @pytest.mark.asyncio
    async def test_lost_redemption_race(self, service, referrer, referee, fake_session):
        """Test a concurrent redemption between lookup and update."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )
        lookup = service.referral_repo.get_redeemable

        async def lookup_then_lose(code):
            found = await lookup(code)
            referral.referee_id = uuid.uuid4()
            return found

        service.referral_repo.get_redeemable = lookup_then_lose

        with pytest.raises(InvalidOrExpiredCode):
            await service.validate_referral_code(referral.code, referee.id)
        assert fake_session.rollbacks == 1


class TestProcessFirstPurchase:
    """Test first-purchase rewards."""

    @pytest.mark.asyncio
    async def test_no_pending_referral(self, service, referee):
        """Test users without a referral get None."""
        assert await service.process_first_purchase(referee.id) is None

    @pytest.mark.asyncio
    async def test_rewards_both_parties(self, service, store, referrer, referee):
        """Test referral is earned and both wallets credited."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )
        await service.validate_referral_code(referral.code, referee.id)

        reward = await service.process_first_purchase(referee.id)

        assert reward.referrer_reward == Decimal("10.00")
        assert reward.referee_reward == Decimal("5.00")
        assert reward.total_earned == Decimal("15.00")
        assert referral.status == ReferralStatus.EARNED.value
        assert referral.reward_amount == Decimal("10.00")
        assert referral.first_purchase_at is not None
        assert referrer.credit_balance == Decimal("10.00")
        assert referrer.referral_credits_earned == Decimal("10.00")
        assert referee.credit_balance == Decimal("5.00")

    @pytest.mark.asyncio
    async def test_creates_milestone_achievement(self, service, store, referrer, referee):
        """Test the first successful referral earns First Referral."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )
        await service.validate_referral_code(referral.code, referee.id)
        await service.process_first_purchase(referee.id)

        (achievement,) = store.all(SocialAchievement)
        assert achievement.user_id == referrer.id
        assert achievement.achievement_name == "First Referral"
        assert achievement.points_awarded == 100
        assert achievement.badge_awarded == "first_referral"
        assert achievement.related_entity_id == referral.id

    @pytest.mark.asyncio
    async def test_second_call_is_noop(self, service, referrer, referee):
        """Test a repeated purchase does not pay twice."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )
        await service.validate_referral_code(referral.code, referee.id)
        await service.process_first_purchase(referee.id)

        assert await service.process_first_purchase(referee.id) is None
        assert referrer.credit_balance == Decimal("10.00")


class TestExpireOldReferrals:
    """Test expiry sweep."""

    @pytest.mark.asyncio
    async def test_expires_only_stale_unredeemed(self, service, store, referrer, referee):
        """Test fresh and redeemed referrals are kept."""
        stale = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )
        stale.invited_at = utc_now() - timedelta(days=31)
        redeemed = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )
        redeemed.invited_at = utc_now() - timedelta(days=40)
        redeemed.referee_id = referee.id
        fresh = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )

        assert await service.expire_old_referrals() == 1
        assert stale.status == ReferralStatus.EXPIRED.value
        assert redeemed.status == ReferralStatus.PENDING.value
        assert fresh.status == ReferralStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_errors_return_zero(self, service):
        """Test store errors are logged and reported as zero."""

        async def broken(cutoff):
            raise RuntimeError("connection lost")

        service.referral_repo.expire_unredeemed_before = broken

        assert await service.expire_old_referrals() == 0


class TestReferralLookups:
    """Test supplementary referral reads."""

    @pytest.mark.asyncio
    async def test_active_code_and_availability(self, service, referrer):
        """Test newest pending code is reported and taken."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )

        assert await service.get_active_referral_code(referrer.id) == referral.code
        assert not await service.is_referral_code_available(referral.code.lower())
        assert await service.get_referral_by_code(referral.code) is referral

    @pytest.mark.asyncio
    async def test_user_referrals_filtered_by_status(self, service, store, referrer):
        """Test status filter on the requester's referrals."""
        add_earned_referrals(store, referrer.id, 2)
        await service.create_referral(referrer.id, ReferralMethod.CODE, ReferralSource.SMS)

        earned = await service.get_user_referrals(referrer.id, ReferralStatus.EARNED)
        everything = await service.get_user_referrals(referrer.id)

        assert len(earned) == 2
        assert len(everything) == 3

    @pytest.mark.asyncio
    async def test_track_interaction(self, service, referrer):
        """Test interactions are appended to the metadata log."""
        referral = await service.create_referral(
            referrer.id, ReferralMethod.CODE, ReferralSource.SMS
        )

        await service.track_referral_interaction(referral.code, ReferralInteraction.CLICK)
        await service.track_referral_interaction(referral.code, ReferralInteraction.VIEW)

        types = [i["type"] for i in referral.extra["interactions"]]
        assert types == ["click", "view"]

    @pytest.mark.asyncio
    async def test_track_unknown_code_is_silent(self, service):
        """Test tracking never raises for unknown codes."""
        await service.track_referral_interaction("UNKNOWN1", ReferralInteraction.VIEW)
