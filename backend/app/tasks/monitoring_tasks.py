"""
Celery tasks for the periodic shift monitoring sweep.
"""
import logging
from contextlib import asynccontextmanager

from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.monitoring_tasks.run_global_shift_monitoring")
def run_global_shift_monitoring():
    """Runs the sweep over all companies; returns the aggregate counts."""
    import asyncio
    return asyncio.run(_run_global_sweep())


@celery_app.task(name="app.tasks.monitoring_tasks.run_company_shift_monitoring")
def run_company_shift_monitoring(company_id: str):
    import asyncio
    return asyncio.run(_run_company_sweep(company_id))


@asynccontextmanager
async def _monitor():
    from app.core.config import settings
    from app.core.database import AsyncSessionLocal, engine
    from app.core.redis import get_redis, close_redis
    from app.repositories import Repositories
    from app.services.shift_monitor import ShiftMonitor
    from app.services.sweep_lock import RedisSweepLocks

    redis = await get_redis()
    try:
        async with AsyncSessionLocal() as db:
            yield ShiftMonitor(
                Repositories.from_session(db),
                locks=RedisSweepLocks(redis, settings.SWEEP_LOCK_TIMEOUT_SECONDS),
            )
    finally:
        await close_redis()
        # pooled connections are bound to this task's event loop
        await engine.dispose()


async def _run_global_sweep() -> dict:
    async with _monitor() as monitor:
        result = await monitor.run_global_sweep()

    return {
        "companies_processed": result.companies_processed,
        "total_violations": result.total_violations,
        "total_exceptions": result.total_exceptions,
    }


async def _run_company_sweep(company_id: str) -> dict:
    import uuid

    async with _monitor() as monitor:
        result = await monitor.process_company_shifts(uuid.UUID(company_id))

    logger.info("Company %s sweep: %s", company_id, result)
    return {
        "violations_found": result.violations_found,
        "exceptions_created": result.exceptions_created,
    }
