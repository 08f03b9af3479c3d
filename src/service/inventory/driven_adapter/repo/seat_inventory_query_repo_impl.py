import asyncpg

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_seat_inventory_query_repo import (
    ISeatInventoryQueryRepo,
)
from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent
from src.service.inventory.domain.enum.seat_status import SeatType
from src.service.inventory.domain.value_object.seat_map import RunInfo, SeatOccupancy, SeatRecord
from src.service.inventory.driven_adapter.repo.intent_command_repo_impl import (
    IntentCommandRepoImpl,
)
from src.service.shared_kernel.domain.value_object.segment import Segment, StationStop


class SeatInventoryQueryRepoImpl(ISeatInventoryQueryRepo):
    @Logger.io
    async def get_run(self, *, run_id: int) -> RunInfo | None:
        async with (await get_asyncpg_pool()).acquire() as conn:
            run = await conn.fetchrow(
                """
                SELECT id, route_id, route_schedule_id, direction, run_date,
                       departure_time, boarding_started
                FROM run
                WHERE id = $1
                """,
                run_id,
            )
            if not run:
                return None

            stations = await conn.fetch(
                """
                SELECT rs.station_id, rs.position, s.name
                FROM route_station rs
                JOIN station s ON s.id = rs.station_id
                WHERE rs.route_id = $1 AND rs.direction = $2
                ORDER BY rs.position
                """,
                run['route_id'],
                run['direction'],
            )

        return RunInfo(
            id=run['id'],
            route_id=run['route_id'],
            route_schedule_id=run['route_schedule_id'],
            direction=run['direction'],
            run_date=run['run_date'],
            departure_time=run['departure_time'],
            boarding_started=run['boarding_started'],
            stations=tuple(
                StationStop(
                    station_id=row['station_id'], position=row['position'], name=row['name']
                )
                for row in stations
            ),
        )

    @Logger.io
    async def list_seats(self, *, run_id: int, route_schedule_id: int) -> list[SeatRecord]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT s.id, s.vehicle_id, s.label, s.row, s.seat_col, s.seat_type,
                       COALESCE(sb.block_online, false) AS blocked_online
                FROM run_vehicle rv
                JOIN seat s ON s.vehicle_id = rv.vehicle_id
                LEFT JOIN seat_block sb
                       ON sb.seat_id = s.id AND sb.route_schedule_id = $2
                WHERE rv.run_id = $1
                ORDER BY rv.is_primary DESC, s.vehicle_id, s.row, s.seat_col
                """,
                run_id,
                route_schedule_id,
            )

        return [self._row_to_seat(row) for row in rows]

    @staticmethod
    def _row_to_seat(row: asyncpg.Record) -> SeatRecord:
        return SeatRecord(
            id=row['id'],
            vehicle_id=row['vehicle_id'],
            label=row['label'],
            row=row['row'],
            col=row['seat_col'],
            seat_type=SeatType(row['seat_type']),
            blocked_online=row['blocked_online'],
        )

    @Logger.io
    async def list_occupancies(self, *, run_id: int) -> list[SeatOccupancy]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT seat_id, board_pos, exit_pos, NULL::text AS owner_key,
                       NULL::timestamptz AS expires_at, order_id
                FROM reservation
                WHERE run_id = $1 AND status = 'active'
                UNION ALL
                SELECT seat_id, board_pos, exit_pos, owner_key, expires_at, order_id
                FROM seat_intent
                WHERE run_id = $1 AND expires_at > now()
                """,
                run_id,
            )

        return [
            SeatOccupancy(
                seat_id=row['seat_id'],
                segment=Segment(board_pos=row['board_pos'], exit_pos=row['exit_pos']),
                owner_key=row['owner_key'],
                expires_at=row['expires_at'],
                order_id=row['order_id'],
            )
            for row in rows
        ]

    @Logger.io
    async def list_owned_intents(self, *, run_id: int, owner_key: str) -> list[SeatIntent]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, run_id, seat_id, owner_key, board_station_id, exit_station_id,
                       board_pos, exit_pos, order_id, expires_at, created_at
                FROM seat_intent
                WHERE run_id = $1 AND owner_key = $2 AND expires_at > now()
                ORDER BY seat_id
                """,
                run_id,
                owner_key,
            )

        return [IntentCommandRepoImpl._row_to_entity(row) for row in rows]
