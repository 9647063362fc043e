"""
Referral expiry task.

Expires pending referral codes nobody redeemed within the expiry window.
Runs daily.
"""

import dramatiq
from loguru import logger

from jobs.async_runner import run_async
from jobs.utils.database import task_session_maker
from nutrifit.services.referral import ReferralService


@dramatiq.actor(max_retries=3, time_limit=300_000)  # 5 min timeout
def expire_referrals() -> dict:
    """
    Expire stale pending referrals.

    Returns:
        Dict with expired count
    """
    logger.info("Starting referral expiry...")

    try:
        result = run_async(_expire_referrals_async())
        logger.info(f"Referral expiry complete: {result['expired']} expired")
        return result
    except Exception as e:
        logger.exception(f"Referral expiry failed: {e}")
        return {"expired": 0}


async def _expire_referrals_async() -> dict:
    async with task_session_maker() as session:
        service = ReferralService(session)
        expired = await service.expire_old_referrals()
    return {"expired": expired}
