"""
Test Configuration and Fixtures

Environment setup MUST happen before application modules are imported: settings and
the log directory are read at import time.

Architecture:
- Unit tests (test/**/unit/) mock every driven port (repos, gateway, broadcaster); no
  database or Redis is needed
- Integration tests (test/**/integration/, marked `integration`) run the raw SQL against
  a real PostgreSQL: the schema is rebuilt once per session and every table is truncated
  before each test. They are skipped when the server cannot be reached.
"""

import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('POSTGRES_DB', 'coach_booking_test_db')
    os.environ.setdefault('ENABLE_REAPER', 'false')
    os.environ.setdefault('SECRET_KEY', 'unit_test_secret')

    # Pool size settings for tests
    os.environ.setdefault('ASYNCPG_POOL_MIN_SIZE', '2')
    os.environ.setdefault('ASYNCPG_POOL_MAX_SIZE', '5')


_early_setup_test_environment()


# ruff: noqa: E402
import asyncio
from collections.abc import AsyncGenerator
from datetime import date, time
from typing import Any
from unittest.mock import AsyncMock

import asyncpg
import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from src.platform.config.core_setting import settings
from src.platform.database.asyncpg_setting import asyncpg_pools, get_asyncpg_pool
from src.platform.database.orm_db_setting import Base
from src.service.inventory.domain.value_object.seat_map import RunInfo
from src.service.shared_kernel.domain.value_object.requester import Requester
from src.service.shared_kernel.domain.value_object.segment import StationStop


@pytest.fixture
def stations() -> tuple[StationStop, ...]:
    """Four stops, ids 11..14 at positions 0..3"""
    return (
        StationStop(station_id=11, position=0, name='Cluj-Napoca'),
        StationStop(station_id=12, position=1, name='Turda'),
        StationStop(station_id=13, position=2, name='Alba Iulia'),
        StationStop(station_id=14, position=3, name='Sibiu'),
    )


@pytest.fixture
def run_info(stations: tuple[StationStop, ...]) -> RunInfo:
    return RunInfo(
        id=7,
        route_id=3,
        route_schedule_id=21,
        direction='tur',
        run_date=date(2026, 7, 1),
        departure_time=time(7, 30),
        boarding_started=False,
        stations=stations,
    )


@pytest.fixture
def requester() -> Requester:
    return Requester.anonymous('019a3fa5-0000-7000-8000-000000000001')


@pytest.fixture
def other_requester() -> Requester:
    return Requester.for_user(42)


@pytest.fixture
def broadcaster() -> AsyncMock:
    mock = AsyncMock()
    mock.publish = AsyncMock(return_value=None)
    return mock


# =============================================================================
# Integration: PostgreSQL schema and per-test cleanup
# =============================================================================
async def _setup_test_database() -> None:
    # Register every table model on Base.metadata
    import src.service.inventory.driven_adapter.model  # noqa: F401
    import src.service.ordering.driven_adapter.model  # noqa: F401
    import src.service.promotion.driven_adapter.model  # noqa: F401

    db_url = settings.DATABASE_URL_ASYNC

    # Create database if not exists
    admin_engine = create_async_engine(
        db_url.replace(f'/{settings.POSTGRES_DB}', '/postgres'), isolation_level='AUTOCOMMIT'
    )
    try:
        async with admin_engine.connect() as conn:
            exists = await conn.scalar(
                text('SELECT 1 FROM pg_database WHERE datname = :name'),
                {'name': settings.POSTGRES_DB},
            )
            if not exists:
                await conn.execute(text(f'CREATE DATABASE "{settings.POSTGRES_DB}"'))
    finally:
        await admin_engine.dispose()

    # Reset schema and create tables (btree_gist comes back with it)
    engine = create_async_engine(db_url)
    try:
        async with engine.begin() as conn:
            await conn.execute(text('DROP SCHEMA public CASCADE'))
            await conn.execute(text('CREATE SCHEMA public'))
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


@pytest.fixture(scope='session')
def postgres_schema() -> None:
    try:
        asyncio.run(_setup_test_database())
    except (OSError, SQLAlchemyError) as e:
        pytest.skip(f'PostgreSQL not reachable: {e}')


@pytest.fixture
async def pg_conn(postgres_schema: None) -> AsyncGenerator[asyncpg.Connection, None]:
    """Empty database; yields a pooled connection for seeding and assertions"""
    pool = await get_asyncpg_pool()
    async with pool.acquire() as conn:
        tables = await conn.fetch(
            "SELECT tablename FROM pg_tables WHERE schemaname = 'public'"
        )
        quoted = ', '.join(f'"{row["tablename"]}"' for row in tables)
        await conn.execute(f'TRUNCATE {quoted} RESTART IDENTITY CASCADE')
        yield conn

    # One pool per test loop; close it before the loop goes away
    loop_pool = asyncpg_pools.pop(id(asyncio.get_running_loop()), None)
    if loop_pool is not None:
        await loop_pool.close()


@pytest.fixture
async def seeded_run(pg_conn: asyncpg.Connection) -> dict[str, Any]:
    """
    One run over three stops (positions 0..2) with a three-seat coach.

    Returns the ids the repositories need: run_id, station_ids (by position), seat_ids.
    """
    station_ids = [
        await pg_conn.fetchval('INSERT INTO station (name) VALUES ($1) RETURNING id', name)
        for name in ('Cluj-Napoca', 'Turda', 'Alba Iulia')
    ]
    route_id = await pg_conn.fetchval(
        "INSERT INTO route (name) VALUES ('Cluj-Napoca - Alba Iulia') RETURNING id"
    )
    schedule_id = await pg_conn.fetchval(
        """
        INSERT INTO route_schedule (route_id, direction, departure_time)
        VALUES ($1, 'tur', $2) RETURNING id
        """,
        route_id,
        time(7, 30),
    )
    run_id = await pg_conn.fetchval(
        """
        INSERT INTO run (
            route_id, route_schedule_id, direction, run_date, departure_time, boarding_started
        )
        VALUES ($1, $2, 'tur', $3, $4, false) RETURNING id
        """,
        route_id,
        schedule_id,
        date(2026, 7, 1),
        time(7, 30),
    )
    vehicle_id = await pg_conn.fetchval(
        "INSERT INTO vehicle (name, plate_number) VALUES ('Setra', 'CJ-01-ABC') RETURNING id"
    )
    seat_ids = [
        await pg_conn.fetchval(
            """
            INSERT INTO seat (vehicle_id, label, row, seat_col, seat_type)
            VALUES ($1, $2, 1, $3, 'normal') RETURNING id
            """,
            vehicle_id,
            str(col),
            col,
        )
        for col in (1, 2, 3)
    ]
    await pg_conn.execute(
        'INSERT INTO run_vehicle (run_id, vehicle_id, is_primary) VALUES ($1, $2, true)',
        run_id,
        vehicle_id,
    )
    return {'run_id': run_id, 'station_ids': station_ids, 'seat_ids': seat_ids}
