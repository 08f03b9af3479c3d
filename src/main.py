"""
Production FastAPI Application

HTTP API, Redis Pub/Sub run rooms and the expiry reaper in one process.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.asyncpg_setting import close_all_asyncpg_pools, get_asyncpg_pool
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.state.redis_client import redis_client
from src.service.ordering.app.command.reap_expired_holds_use_case import (
    ReapExpiredHoldsUseCase,
)
from src.service.ordering.driving_adapter.job.expiry_reaper_job import ExpiryReaperJob


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Coach Booking] Starting up...')

    tracing = TracingConfig(service_name='coach-booking')
    tracing.setup()
    Logger.base.info('📊 [Coach Booking] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Coach Booking] Dependency injection wired')

    engine = get_engine()
    tracing.instrument_sqlalchemy(engine=engine)
    tracing.instrument_redis()
    await create_db_and_tables()
    Logger.base.info('🗄️  [Coach Booking] Schema ensured')

    # Fail fast when Redis is unreachable
    await redis_client.initialize()
    Logger.base.info('📡 [Coach Booking] Redis initialized')

    await get_asyncpg_pool()
    Logger.base.info('🏊 [Coach Booking] Asyncpg pool initialized')

    async with anyio.create_task_group() as tg:
        if settings.ENABLE_REAPER:
            job = ExpiryReaperJob(
                use_case=ReapExpiredHoldsUseCase(
                    expiry_reaper_repo=container.expiry_reaper_repo(),
                    run_event_broadcaster=container.run_event_broadcaster(),
                ),
                interval_seconds=settings.REAPER_INTERVAL_SECONDS,
            )
            await job.start(task_group=tg)

        Logger.base.info('✅ [Coach Booking] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Coach Booking] Shutting down...')
        tg.cancel_scope.cancel()

    await close_all_asyncpg_pools()
    Logger.base.info('🏊 [Coach Booking] Asyncpg pools closed')

    await dispose_engine()

    await redis_client.disconnect()
    Logger.base.info('📡 [Coach Booking] Redis disconnected')

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [Coach Booking] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
