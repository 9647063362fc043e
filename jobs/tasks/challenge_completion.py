"""
Challenge completion task.

Evaluates every active challenge and completes participants who met the
success criteria. Runs hourly.
"""

import dramatiq
from loguru import logger

from jobs.async_runner import run_async
from jobs.utils.database import task_session_maker
from nutrifit.repositories.challenge_repository import ChallengeRepository
from nutrifit.services.challenge import ChallengeService


@dramatiq.actor(max_retries=3, time_limit=900_000)  # 15 min timeout
def check_challenge_completions() -> dict:
    """
    Run completion checks for all active challenges.

    Returns:
        Dict with challenges checked, participants completed and failures
    """
    logger.info("Starting challenge completion checks...")

    try:
        result = run_async(_check_completions_async())
        logger.info(
            f"Challenge completion checks complete: "
            f"{result['checked']} challenges, "
            f"{result['completed']} participants completed, "
            f"{result['failed']} failed"
        )
        return result
    except Exception as e:
        logger.exception(f"Challenge completion checks failed: {e}")
        return {"checked": 0, "completed": 0, "failed": 0}


async def _check_completions_async() -> dict:
    checked = completed = failed = 0

    async with task_session_maker() as session:
        challenge_ids = await ChallengeRepository(session).get_active_ids()

    for challenge_id in challenge_ids:
        # One session per challenge so a failure only affects that challenge
        async with task_session_maker() as session:
            service = ChallengeService(session)
            try:
                completed += await service.check_challenge_completion(
                    challenge_id
                )
                checked += 1
            except Exception as e:
                failed += 1
                await session.rollback()
                logger.error(
                    f"Completion check failed for challenge {challenge_id}: {e}"
                )

    return {"checked": checked, "completed": completed, "failed": failed}
