"""
Shared service plumbing.

Every engagement service owns one AsyncSession and a loguru logger bound to
its class name.
"""

import functools
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession


R = TypeVar("R")
ServiceMethod = Callable[..., Awaitable[R]]


class BaseService:
    """Session holder with a service-bound logger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.logger = logger.bind(service=type(self).__name__)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def transaction(func: ServiceMethod) -> ServiceMethod:
    """
    Commit after the wrapped method returns; roll back if it raises.

    The exception is re-raised after the rollback.
    """

    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            await self.rollback()
            self.logger.warning(
                "Rolled back " + func.__name__,
                extra={"operation": func.__name__, "error": str(e)},
            )
            raise
        await self.commit()
        return result

    return wrapper


def log_operation(func: ServiceMethod) -> ServiceMethod:
    """Log how long the wrapped method took and whether it raised."""

    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        started = time.perf_counter()
        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            self.logger.error(
                func.__name__ + " failed",
                extra={
                    "operation": func.__name__,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000),
                    "error": str(e),
                },
            )
            raise

        self.logger.info(
            func.__name__ + " finished",
            extra={
                "operation": func.__name__,
                "elapsed_ms": round((time.perf_counter() - started) * 1000),
            },
        )
        return result

    return wrapper
