"""
Seat Intent Command Repository (asyncpg)

Every write touching a (run, seat) pair takes the transaction-scoped advisory lock
pg_advisory_xact_lock(run_id, seat_id) first. Holds and reservations live in two
tables, each with its own gist exclusion constraint; the pair lock keeps the
cross-table check (hold vs reservation) consistent under concurrent writers.

Order checkout and payment confirmation reuse the `*_tx` helpers inside their own
transaction so binding, materializing and purging holds commit atomically with the
order row.
"""

from collections.abc import Iterable
from datetime import datetime

import asyncpg
from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_intent_command_repo import (
    IIntentCommandRepo,
    IntentWriteResult,
)
from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent
from src.service.inventory.domain.enum.seat_status import HoldStatus
from src.service.shared_kernel.domain.value_object.segment import Segment


_INTENT_COLUMNS = """
    id, run_id, seat_id, owner_key, board_station_id, exit_station_id,
    board_pos, exit_pos, order_id, expires_at, created_at
"""


class IntentCommandRepoImpl(IIntentCommandRepo):
    @staticmethod
    def _row_to_entity(row: asyncpg.Record) -> SeatIntent:
        return SeatIntent(
            id=row['id'],
            run_id=row['run_id'],
            seat_id=row['seat_id'],
            owner_key=row['owner_key'],
            board_station_id=row['board_station_id'],
            exit_station_id=row['exit_station_id'],
            segment=Segment(board_pos=row['board_pos'], exit_pos=row['exit_pos']),
            order_id=row['order_id'],
            expires_at=row['expires_at'],
            created_at=row['created_at'],
        )

    @staticmethod
    async def lock_seats_tx(
        conn: asyncpg.Connection, *, run_id: int, seat_ids: Iterable[int]
    ) -> None:
        """Transaction-scoped (run, seat) locks, taken in ascending seat order"""
        for seat_id in sorted(set(seat_ids)):
            await conn.execute('SELECT pg_advisory_xact_lock($1, $2)', run_id, seat_id)

    @Logger.io
    async def create(self, *, intent: SeatIntent, ttl_seconds: int) -> IntentWriteResult:
        run_id, seat_id, owner_key = intent.run_id, intent.seat_id, intent.owner_key
        board_pos, exit_pos = intent.segment.board_pos, intent.segment.exit_pos

        async with (await get_asyncpg_pool()).acquire() as conn:
            async with conn.transaction():
                await self.lock_seats_tx(conn, run_id=run_id, seat_ids=[seat_id])

                # Lapsed holds behave as absent; clear them before the exclusion check
                await conn.execute(
                    """
                    DELETE FROM seat_intent
                    WHERE run_id = $1 AND seat_id = $2 AND expires_at <= now()
                    """,
                    run_id,
                    seat_id,
                )

                renewed = await conn.fetchrow(
                    f"""
                    UPDATE seat_intent
                    SET expires_at = now() + $6::int * interval '1 second'
                    WHERE run_id = $1 AND seat_id = $2 AND owner_key = $3
                      AND board_pos = $4 AND exit_pos = $5 AND order_id IS NULL
                    RETURNING {_INTENT_COLUMNS}
                    """,
                    run_id,
                    seat_id,
                    owner_key,
                    board_pos,
                    exit_pos,
                    ttl_seconds,
                )
                if renewed:
                    Logger.base.info(
                        f'🔁 [INTENT] Renewed run={run_id} seat={seat_id} '
                        f'segment=[{board_pos},{exit_pos})'
                    )
                    return IntentWriteResult(intent=self._row_to_entity(renewed), renewed=True)

                # A changed segment replaces the owner's previous unbound hold on the seat
                await conn.execute(
                    """
                    DELETE FROM seat_intent
                    WHERE run_id = $1 AND seat_id = $2 AND owner_key = $3
                      AND order_id IS NULL
                      AND int4range(board_pos, exit_pos) && int4range($4, $5)
                    """,
                    run_id,
                    seat_id,
                    owner_key,
                    board_pos,
                    exit_pos,
                )

                holder = await conn.fetchval(
                    """
                    SELECT owner_key FROM seat_intent
                    WHERE run_id = $1 AND seat_id = $2
                      AND int4range(board_pos, exit_pos) && int4range($3, $4)
                    LIMIT 1
                    """,
                    run_id,
                    seat_id,
                    board_pos,
                    exit_pos,
                )
                if holder is not None:
                    hold_status = HoldStatus.MINE if holder == owner_key else HoldStatus.OTHER
                    raise ConflictError(
                        'Seat is held on this segment',
                        code='SEAT_HELD',
                        hold_status=str(hold_status),
                    )

                reserved = await conn.fetchval(
                    """
                    SELECT 1 FROM reservation
                    WHERE run_id = $1 AND seat_id = $2 AND status = 'active'
                      AND int4range(board_pos, exit_pos) && int4range($3, $4)
                    LIMIT 1
                    """,
                    run_id,
                    seat_id,
                    board_pos,
                    exit_pos,
                )
                if reserved:
                    raise ConflictError('Seat is already taken on this segment', code='SEAT_TAKEN')

                try:
                    row = await conn.fetchrow(
                        f"""
                        INSERT INTO seat_intent (
                            run_id, seat_id, owner_key, board_station_id, exit_station_id,
                            board_pos, exit_pos, expires_at
                        )
                        VALUES ($1, $2, $3, $4, $5, $6, $7,
                                now() + $8::int * interval '1 second')
                        RETURNING {_INTENT_COLUMNS}
                        """,
                        run_id,
                        seat_id,
                        owner_key,
                        intent.board_station_id,
                        intent.exit_station_id,
                        board_pos,
                        exit_pos,
                        ttl_seconds,
                    )
                except asyncpg.exceptions.ExclusionViolationError:
                    raise ConflictError(
                        'Seat is held on this segment',
                        code='SEAT_HELD',
                        hold_status=str(HoldStatus.OTHER),
                    )

        Logger.base.info(
            f'🎫 [INTENT] Created run={run_id} seat={seat_id} segment=[{board_pos},{exit_pos})'
        )
        return IntentWriteResult(intent=self._row_to_entity(row))

    @Logger.io
    async def release(self, *, run_id: int, seat_id: int, owner_key: str) -> int:
        async with (await get_asyncpg_pool()).acquire() as conn:
            result = await conn.execute(
                """
                DELETE FROM seat_intent
                WHERE run_id = $1 AND seat_id = $2 AND owner_key = $3 AND order_id IS NULL
                """,
                run_id,
                seat_id,
                owner_key,
            )
        # asyncpg returns the command tag, e.g. 'DELETE 1'
        return int(result.split()[-1])

    # ========== Order transaction helpers ==========

    async def bind_to_order_tx(
        self,
        conn: asyncpg.Connection,
        *,
        order_id: UUID,
        owner_key: str,
        run_id: int,
        seat_ids: Iterable[int],
        segment: Segment,
        expires_at: datetime,
    ) -> list[int]:
        """Attach the owner's live unbound holds to the order; returns bound seat ids"""
        rows = await conn.fetch(
            """
            UPDATE seat_intent
            SET order_id = $1, expires_at = $2
            WHERE run_id = $3 AND owner_key = $4 AND seat_id = ANY($5::int[])
              AND board_pos = $6 AND exit_pos = $7
              AND order_id IS NULL AND expires_at > now()
            RETURNING seat_id
            """,
            order_id,
            expires_at,
            run_id,
            owner_key,
            sorted(set(seat_ids)),
            segment.board_pos,
            segment.exit_pos,
        )
        return [row['seat_id'] for row in rows]

    async def extend_for_order_tx(
        self, conn: asyncpg.Connection, *, order_id: UUID, expires_at: datetime
    ) -> list[int]:
        """Push back the expiry of the order's still-live holds; returns their seat ids"""
        rows = await conn.fetch(
            """
            UPDATE seat_intent SET expires_at = $2
            WHERE order_id = $1 AND expires_at > now()
            RETURNING seat_id
            """,
            order_id,
            expires_at,
        )
        return [row['seat_id'] for row in rows]

    async def delete_for_order_tx(self, conn: asyncpg.Connection, *, order_id: UUID) -> int:
        result = await conn.execute('DELETE FROM seat_intent WHERE order_id = $1', order_id)
        return int(result.split()[-1])

    async def materialize_tx(self, conn: asyncpg.Connection, *, order_id: UUID) -> dict[int, int]:
        """
        Turn the paid order's items into active reservations.

        Idempotent: an order that already has reservations is left untouched and an
        empty mapping is returned. Otherwise returns {seat_id: reservation_id}.
        Overlapping holds of other shoppers lose to the paid order and are removed.

        Raises:
            ConflictError(code='SEAT_TAKEN'): an active reservation overlaps
        """
        items = await conn.fetch(
            """
            SELECT o.run_id, oi.seat_id
            FROM order_item oi JOIN booking_order o ON o.id = oi.order_id
            WHERE oi.order_id = $1
            ORDER BY oi.seat_id
            """,
            order_id,
        )
        if items:
            await self.lock_seats_tx(
                conn, run_id=items[0]['run_id'], seat_ids=[item['seat_id'] for item in items]
            )

        existing = await conn.fetchval(
            'SELECT count(*) FROM reservation WHERE order_id = $1', order_id
        )
        if existing:
            Logger.base.info(f'⏭️ [MATERIALIZE] Order {order_id} already has reservations')
            return {}

        purged = await conn.execute(
            """
            DELETE FROM seat_intent si
            USING order_item oi, booking_order o
            WHERE oi.order_id = $1 AND o.id = oi.order_id
              AND si.run_id = o.run_id AND si.seat_id = oi.seat_id
              AND int4range(si.board_pos, si.exit_pos) && int4range(o.board_pos, o.exit_pos)
            """,
            order_id,
        )
        await self.delete_for_order_tx(conn, order_id=order_id)

        try:
            rows = await conn.fetch(
                """
                INSERT INTO reservation (
                    run_id, seat_id, order_id, board_station_id, exit_station_id,
                    board_pos, exit_pos, passenger_name, passenger_phone,
                    price_amount, discount_type_id, discount_amount, promo_discount_amount,
                    status
                )
                SELECT o.run_id, oi.seat_id, o.id, o.board_station_id, o.exit_station_id,
                       o.board_pos, o.exit_pos, oi.passenger_name,
                       COALESCE(oi.passenger_phone, o.contact_phone),
                       oi.price_amount, oi.discount_type_id, oi.discount_amount,
                       oi.promo_discount_amount, 'active'
                FROM order_item oi JOIN booking_order o ON o.id = oi.order_id
                WHERE oi.order_id = $1
                ON CONFLICT (order_id, seat_id) DO NOTHING
                RETURNING id, seat_id
                """,
                order_id,
            )
        except asyncpg.exceptions.ExclusionViolationError:
            raise ConflictError('Seat is already taken on this segment', code='SEAT_TAKEN')

        Logger.base.info(
            f'🎟️ [MATERIALIZE] Order {order_id}: {len(rows)} reservation(s), '
            f'holds purged: {purged.split()[-1]}'
        )
        return {row['seat_id']: row['id'] for row in rows}
