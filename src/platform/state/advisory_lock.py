"""
Named mutual exclusion on PostgreSQL session advisory locks.

pg_try_advisory_lock never waits: a second process asking for the same name gets
False immediately and skips its work instead of queueing behind the holder.
The lock lives on one pooled connection for the duration of `hold()` and is released
explicitly before the connection returns to the pool (or implicitly by PostgreSQL
if the connection dies).
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.exception.exceptions import LockBusyError
from src.platform.logging.loguru_io import Logger


class AdvisoryLock:
    def __init__(self, *, name: str) -> None:
        self.name = name

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire the lock or raise LockBusyError.

        Yields the connection that owns the lock so callers may run their work on it.
        """
        pool = await get_asyncpg_pool()
        async with pool.acquire() as conn:
            acquired = await conn.fetchval('SELECT pg_try_advisory_lock(hashtext($1))', self.name)
            if not acquired:
                Logger.base.debug(f'⏳ [LOCK] Busy: {self.name}')
                raise LockBusyError(self.name)

            Logger.base.debug(f'🔒 [LOCK] Acquired: {self.name}')
            try:
                yield conn
            finally:
                try:
                    await conn.execute('SELECT pg_advisory_unlock(hashtext($1))', self.name)
                    Logger.base.debug(f'🔓 [LOCK] Released: {self.name}')
                except Exception as e:
                    # Session end releases it server-side
                    Logger.base.warning(f'⚠️ [LOCK] Unlock failed for {self.name}: {e}')
