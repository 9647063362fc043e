"""
Side effect retry task.

Applies pending wallet credits and achievements left behind by failed
dispatches. Runs every 5 minutes.
"""

import dramatiq
from loguru import logger

from jobs.async_runner import run_async
from jobs.utils.database import task_session_maker
from nutrifit.services.side_effects import SideEffectService


@dramatiq.actor(max_retries=3, time_limit=300_000)  # 5 min timeout
def retry_pending_side_effects() -> dict:
    """
    Retry one batch of pending side effects.

    Returns:
        Dict with processed and applied counts
    """
    logger.info("Starting side effect retry...")

    try:
        result = run_async(_retry_side_effects_async())
        logger.info(
            f"Side effect retry complete: "
            f"{result['applied']}/{result['processed']} applied"
        )
        return result
    except Exception as e:
        logger.exception(f"Side effect retry failed: {e}")
        return {"processed": 0, "applied": 0}


async def _retry_side_effects_async() -> dict:
    async with task_session_maker() as session:
        return await SideEffectService(session).process_pending()
