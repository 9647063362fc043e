"""Unit tests for referral analytics and share content."""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from nutrifit.models import Referral
from nutrifit.services.referral import (
    ReferralAnalyticsService,
    build_analytics,
    generate_share_content,
)
from nutrifit.utils.exceptions import Unauthenticated


INVITED = datetime(2026, 4, 1, tzinfo=UTC)


def referral(source="sms", status="pending", referee=False, purchase_after=None, reward=None):
    r = Referral(
        referrer_id=uuid.uuid4(),
        code="ABCD1234",
        method="code",
        source=source,
        status=status,
        invited_at=INVITED,
        reward_amount=reward,
    )
    if referee or purchase_after is not None:
        r.referee_id = uuid.uuid4()
    if purchase_after is not None:
        r.first_purchase_at = INVITED + purchase_after
    return r


class TestBuildAnalytics:
    """Test analytics aggregation."""

    def test_no_referrals(self):
        """Test zeros for a user without referrals."""
        analytics = build_analytics([])

        assert analytics.total_referrals == 0
        assert analytics.conversion_rate == 0
        assert analytics.total_rewards_earned == Decimal("0")
        assert analytics.top_referral_sources == []

    def test_conversion(self):
        """Test signups, conversions, rewards and timing."""
        referrals = [
            referral("sms", "earned", purchase_after=timedelta(days=2), reward=Decimal("10.00")),
            referral("sms", "credited", purchase_after=timedelta(days=4), reward=Decimal("12.00")),
            referral("email", "pending", referee=True),
            referral("sms"),
        ]

        analytics = build_analytics(referrals)

        assert analytics.total_referrals == 4
        assert analytics.successful_signups == 3
        assert analytics.converted_purchases == 2
        assert analytics.total_rewards_earned == Decimal("22.00")
        assert analytics.avg_conversion_days == 3
        assert analytics.conversion_rate == 50
        top = analytics.top_referral_sources[0]
        assert (top.source, top.count, top.conversion_rate) == ("sms", 3, 75)

    def test_top_sources_limited(self):
        """Test at most five sources are reported."""
        referrals = [referral(f"source{i}") for i in range(7)]
        assert len(build_analytics(referrals).top_referral_sources) == 5


class TestAnalyticsService:
    """Test analytics service."""

    @pytest.mark.asyncio
    async def test_unauthenticated(self, fake_session):
        """Test anonymous requesters are rejected."""
        with pytest.raises(Unauthenticated):
            await ReferralAnalyticsService(fake_session).get_referral_analytics(None)

    @pytest.mark.asyncio
    async def test_only_own_referrals(self, fake_session, store):
        """Test other users' referrals are ignored."""
        me = store.add_user()
        mine = referral()
        mine.referrer_id = me.id
        store.add(mine)
        store.add(referral())

        analytics = await ReferralAnalyticsService(fake_session).get_referral_analytics(me.id)

        assert analytics.total_referrals == 1


class TestShareContent:
    """Test share text."""

    def test_share_link(self):
        """Test the signup link carries the upper-cased code."""
        content = generate_share_content("ab12cd34", "Ana")

        assert content.url.endswith("/signup?ref=AB12CD34")
        assert "Ana invited you" in content.message
        assert "AB12CD34" in content.message

    def test_default_inviter(self):
        """Test anonymous inviter wording."""
        assert "A friend invited you" in generate_share_content("AB12CD34").message
