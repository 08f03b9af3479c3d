"""
asyncpg connection pool (one per event loop)

Used by every hot path: holds, seat-map reads, order checkout / confirmation and the
reaper. uuid columns are decoded to uuid_utils.UUID so order ids round-trip as UUID7.
"""

import asyncio

import asyncpg
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


# Global connection pools per event loop
asyncpg_pools: dict[int, asyncpg.Pool] = {}


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Initialize each connection with the uuid_utils codec"""

    def _uuid_decoder(value: bytes) -> UUID:
        return UUID(bytes=value)

    def _uuid_encoder(value: UUID) -> bytes:
        return value.bytes

    await conn.set_type_codec(
        'uuid',
        encoder=_uuid_encoder,
        decoder=_uuid_decoder,
        schema='pg_catalog',
        format='binary',
    )


async def get_asyncpg_pool() -> asyncpg.Pool:
    loop_id = id(asyncio.get_running_loop())

    # Fast path: pool already exists for this loop
    if loop_id in asyncpg_pools:
        return asyncpg_pools[loop_id]

    # Slow path: create new pool (startup, or first call on a fresh test loop)
    dsn = settings.DATABASE_URL_ASYNC.replace('postgresql+asyncpg://', 'postgresql://')
    pool = await asyncpg.create_pool(
        dsn,
        min_size=settings.ASYNCPG_POOL_MIN_SIZE,
        max_size=settings.ASYNCPG_POOL_MAX_SIZE,
        command_timeout=settings.ASYNCPG_POOL_COMMAND_TIMEOUT,
        max_inactive_connection_lifetime=settings.ASYNCPG_POOL_MAX_INACTIVE_LIFETIME,
        timeout=settings.ASYNCPG_POOL_TIMEOUT,
        max_queries=settings.ASYNCPG_POOL_MAX_QUERIES,
        init=_init_connection,
    )
    asyncpg_pools[loop_id] = pool
    Logger.base.info(
        f'🏊 [Pool] asyncpg pool created (min={pool.get_min_size()}, max={pool.get_max_size()})'
    )
    return pool


async def close_all_asyncpg_pools() -> None:
    """
    Close all asyncpg connection pools across all event loops

    Only call this during application shutdown.
    """
    for _, pool in list(asyncpg_pools.items()):
        try:
            await pool.close()
        except Exception as e:
            Logger.base.warning(f'⚠️ [Pool] Error closing pool: {e}')
    asyncpg_pools.clear()
