"""
Periodic settlement sweeps
"""

import asyncio
import concurrent.futures
import logging
from typing import Any, Awaitable, Callable, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gamewallet.celery_app import celery
from gamewallet.core.config import settings
from gamewallet.db.session import build_engine
from gamewallet.services.gaming import GamingService

logger = logging.getLogger(__name__)


async def _with_service(action: Callable[[GamingService], Awaitable[Any]]) -> Any:
    # asyncpg pools are bound to the loop that created them; each run gets its own engine
    engine = build_engine(settings.database_url)
    try:
        service = GamingService(
            session_factory=async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        )
        return await action(service)
    finally:
        await engine.dispose()


def _run(coro) -> Any:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    # Called from inside a running loop (eager mode in an async test)
    with concurrent.futures.ThreadPoolExecutor() as executor:
        return executor.submit(asyncio.run, coro).result()


@celery.task(bind=True, max_retries=3, default_retry_delay=60)
def mature_positions(self) -> Dict[str, Any]:
    """
    Complete every staking and vesting position whose lock has ended.
    """
    try:
        logger.info("Starting maturity sweep")
        result = _run(_with_service(lambda service: service.mature_due_positions()))
        logger.info(f"Maturity sweep done: {len(result['completed'])} positions completed")
        return result
    except Exception as exc:
        logger.error(f"Error in maturity sweep: {exc}")
        if self.request.retries < self.max_retries:
            raise self.retry(countdown=60 * (2 ** self.request.retries))
        raise


@celery.task(bind=True, max_retries=3, default_retry_delay=60)
def close_due_draws(self) -> Dict[str, Any]:
    """
    Close and draw scheduled lotteries whose draw date has passed.
    """
    try:
        logger.info("Starting due draw sweep")
        results = _run(_with_service(lambda service: service.close_due_draws()))
        logger.info(f"Drew {len(results)} due lottery draws")
        return {"draws": results}
    except Exception as exc:
        logger.error(f"Error drawing due lotteries: {exc}")
        if self.request.retries < self.max_retries:
            raise self.retry(countdown=60 * (2 ** self.request.retries))
        raise
