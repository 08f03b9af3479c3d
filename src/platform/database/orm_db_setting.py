"""
SQLAlchemy async engine and schema management

This module provides:
1. AsyncEngineManager: event-loop-aware engine / session maker
2. Base: declarative base for every table model
3. create_db_and_tables(): creates the schema, including the btree_gist extension
   needed by the segment exclusion constraints on seat_intent and reservation

Hot paths (holds, orders, reaper) run raw SQL on the asyncpg pool (asyncpg_setting.py);
the ORM side owns the schema definition.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import DDL, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class AsyncEngineManager:
    """
    Manages the SQLAlchemy async engine with event loop awareness.

    Ensures the engine is always bound to the current event loop to prevent
    "Task got Future attached to a different loop" errors (pytest-asyncio creates
    a loop per test).
    """

    def __init__(self) -> None:
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

        if self._loop is not current_loop:
            if self._engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, dropping old engine...')
                self._engine = None
                self._session_maker = None

            Logger.base.info(f'🔗 [DB] Creating engine for event loop {id(current_loop)}')
            self._engine = self._create_engine()
            self._loop = current_loop

        assert self._engine is not None
        return self._engine

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None
            self._loop = None

    @staticmethod
    def _create_engine() -> AsyncEngine:
        return create_async_engine(
            settings.DATABASE_URL_ASYNC,
            echo=False,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


# Global engine manager
_engine_manager = AsyncEngineManager()


def get_engine() -> AsyncEngine:
    return _engine_manager.get_engine()


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return _engine_manager.get_session_maker()


async def dispose_engine() -> None:
    await _engine_manager.dispose()


class Base(DeclarativeBase):
    pass


# gist indexes over (int = , int4range &&) need btree_gist
event.listen(
    Base.metadata,
    'before_create',
    DDL('CREATE EXTENSION IF NOT EXISTS btree_gist'),
)


async def create_db_and_tables() -> None:
    """Create database tables if they don't exist"""
    # Register every table model on Base.metadata
    import src.service.inventory.driven_adapter.model  # noqa: F401
    import src.service.ordering.driven_adapter.model  # noqa: F401
    import src.service.promotion.driven_adapter.model  # noqa: F401

    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️ [DB] Schema ensured')
    except Exception as e:
        error_msg = str(e).lower()
        if any(keyword in error_msg for keyword in ['already exists', 'duplicate key']):
            Logger.base.info('Tables already exist, skipping creation')
        else:
            Logger.base.error(f'Error creating tables: {e}')
            raise


class Database:
    """
    Session factory for dependency injection (repositories receive `session_factory`)
    """

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session context; rolls back on exception"""
        async with get_session_maker()() as session:
            yield session
