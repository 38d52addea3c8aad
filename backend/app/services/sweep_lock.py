"""
Per-company serialization of monitoring sweeps.

SweepLocks guards sweeps inside one process (API-triggered runs);
RedisSweepLocks leases a Redis lock so scheduled workers and API processes
never sweep the same company at the same time.
"""
import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

from redis.exceptions import LockError

logger = logging.getLogger(__name__)


class SweepLockTimeout(Exception):
    """The company lock could not be acquired in time."""


class SweepLocks:

    def __init__(self):
        self._locks: dict[uuid.UUID, asyncio.Lock] = {}

    @asynccontextmanager
    async def hold(self, company_id: uuid.UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(company_id, asyncio.Lock())
        async with lock:
            yield


class RedisSweepLocks:

    def __init__(self, redis, lease_seconds: int, key_prefix: str = "shift-sweep"):
        self.redis = redis
        self.lease_seconds = lease_seconds
        self.key_prefix = key_prefix

    @asynccontextmanager
    async def hold(self, company_id: uuid.UUID) -> AsyncIterator[None]:
        lock = self.redis.lock(
            f"{self.key_prefix}:{company_id}",
            timeout=self.lease_seconds,
            blocking_timeout=self.lease_seconds,
        )
        if not await lock.acquire():
            raise SweepLockTimeout(f"Sweep lock for company {company_id} not acquired")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning("Sweep lock for company %s expired before release", company_id)
