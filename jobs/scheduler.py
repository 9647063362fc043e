"""
Job scheduler.

Enqueues the periodic engagement jobs on the dramatiq broker. Workers are
started separately with ``dramatiq jobs.tasks.referral_expiry
jobs.tasks.challenge_completion jobs.tasks.side_effect_retry``.
"""

import asyncio
import signal

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from jobs.tasks.challenge_completion import check_challenge_completions
from jobs.tasks.referral_expiry import expire_referrals
from jobs.tasks.side_effect_retry import retry_pending_side_effects
from nutrifit.logging_config import setup_logging


def create_scheduler() -> AsyncIOScheduler:
    """
    Build the scheduler with all periodic jobs registered.

    Returns:
        Configured, not yet started scheduler
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        expire_referrals.send,
        "cron",
        hour=3,
        minute=0,
        id="expire_referrals",
        name="Expire unredeemed referrals",
        replace_existing=True,
    )
    scheduler.add_job(
        check_challenge_completions.send,
        "interval",
        hours=1,
        id="check_challenge_completions",
        name="Check challenge completions",
        replace_existing=True,
    )
    scheduler.add_job(
        retry_pending_side_effects.send,
        "interval",
        minutes=5,
        id="retry_pending_side_effects",
        name="Retry pending side effects",
        replace_existing=True,
    )

    return scheduler


async def main() -> None:
    """Run the scheduler until SIGINT or SIGTERM."""
    setup_logging("scheduler")

    scheduler = create_scheduler()
    scheduler.start()
    logger.info(
        f"Scheduler started with {len(scheduler.get_jobs())} jobs"
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await stop_event.wait()

    scheduler.shutdown(wait=False)
    logger.info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
