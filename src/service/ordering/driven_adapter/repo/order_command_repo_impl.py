"""
Order Command Repository Implementation (asyncpg)

Every state change runs in one PostgreSQL transaction together with the matching hold
and reservation writes, so an order and its seats never disagree after a crash.
"""

from datetime import datetime
from decimal import Decimal

import asyncpg
from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.driven_adapter.repo.intent_command_repo_impl import (
    IntentCommandRepoImpl,
)
from src.service.ordering.app.interface.i_order_command_repo import (
    ConfirmResult,
    IOrderCommandRepo,
)
from src.service.ordering.domain.entity.order_entity import Order, OrderItem
from src.service.ordering.domain.enum.order_status import (
    ConfirmOutcome,
    OrderStatus,
    PaymentRecordStatus,
)
from src.service.ordering.domain.value_object.contact import Contact
from src.service.ordering.domain.value_object.payment_session import PaymentSession
from src.service.shared_kernel.domain.value_object.segment import Segment


_ORDER_COLUMNS = """
    id, owner_key, run_id, board_station_id, exit_station_id, board_pos, exit_pos,
    contact_name, contact_phone, contact_email, promo_code_id, promo_code,
    subtotal, discount_total, amount_due, currency, status, provider,
    provider_order_id, payment_url, expires_at, created_at, updated_at, paid_at
"""


class OrderCommandRepoImpl(IOrderCommandRepo):
    def __init__(self, *, intent_command_repo: IntentCommandRepoImpl) -> None:
        self.intent_command_repo = intent_command_repo

    @staticmethod
    def _row_to_entity(row: asyncpg.Record, items: list[asyncpg.Record]) -> Order:
        return Order(
            id=row['id'],
            owner_key=row['owner_key'],
            run_id=row['run_id'],
            board_station_id=row['board_station_id'],
            exit_station_id=row['exit_station_id'],
            segment=Segment(board_pos=row['board_pos'], exit_pos=row['exit_pos']),
            contact=Contact(
                name=row['contact_name'], phone=row['contact_phone'], email=row['contact_email']
            ),
            subtotal=row['subtotal'],
            discount_total=row['discount_total'],
            amount_due=row['amount_due'],
            currency=row['currency'],
            expires_at=row['expires_at'],
            status=OrderStatus(row['status']),
            promo_code_id=row['promo_code_id'],
            promo_code=row['promo_code'],
            provider=row['provider'],
            provider_order_id=row['provider_order_id'],
            payment_url=row['payment_url'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
            paid_at=row['paid_at'],
            items=[
                OrderItem(
                    id=item['id'],
                    seat_id=item['seat_id'],
                    passenger_name=item['passenger_name'],
                    passenger_phone=item['passenger_phone'],
                    discount_type_id=item['discount_type_id'],
                    price_amount=item['price_amount'],
                    discount_amount=item['discount_amount'],
                    promo_discount_amount=item['promo_discount_amount'],
                )
                for item in items
            ],
        )

    async def _fetch(
        self, conn: asyncpg.Connection, *, where: str, value: object, for_update: bool = False
    ) -> Order | None:
        row = await conn.fetchrow(
            f"SELECT {_ORDER_COLUMNS} FROM booking_order WHERE {where} = $1"
            f"{' FOR UPDATE' if for_update else ''}",
            value,
        )
        if not row:
            return None
        items = await conn.fetch(
            """
            SELECT id, seat_id, passenger_name, passenger_phone, discount_type_id,
                   price_amount, discount_amount, promo_discount_amount
            FROM order_item
            WHERE order_id = $1
            ORDER BY id
            """,
            row['id'],
        )
        return self._row_to_entity(row, list(items))

    @Logger.io
    async def create_with_holds(self, *, order: Order) -> Order:
        async with (await get_asyncpg_pool()).acquire() as conn:
            async with conn.transaction():
                await self.intent_command_repo.lock_seats_tx(
                    conn, run_id=order.run_id, seat_ids=order.seat_ids
                )

                taken = await conn.fetch(
                    """
                    SELECT DISTINCT seat_id FROM reservation
                    WHERE run_id = $1 AND seat_id = ANY($2::int[]) AND status = 'active'
                      AND int4range(board_pos, exit_pos) && int4range($3, $4)
                    """,
                    order.run_id,
                    order.seat_ids,
                    order.segment.board_pos,
                    order.segment.exit_pos,
                )
                if taken:
                    raise ConflictError(
                        'Seat is already taken on this segment',
                        code='SEAT_TAKEN',
                        seat_ids=sorted(row['seat_id'] for row in taken),
                    )

                await conn.execute(
                    """
                    INSERT INTO booking_order (
                        id, owner_key, run_id, board_station_id, exit_station_id,
                        board_pos, exit_pos, contact_name, contact_phone, contact_email,
                        promo_code_id, promo_code, subtotal, discount_total, amount_due,
                        currency, status, expires_at, created_at, updated_at
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14,
                            $15, $16, $17, $18, now(), now())
                    """,
                    order.id,
                    order.owner_key,
                    order.run_id,
                    order.board_station_id,
                    order.exit_station_id,
                    order.segment.board_pos,
                    order.segment.exit_pos,
                    order.contact.name,
                    order.contact.phone,
                    order.contact.email,
                    order.promo_code_id,
                    order.promo_code,
                    order.subtotal,
                    order.discount_total,
                    order.amount_due,
                    order.currency,
                    str(order.status),
                    order.expires_at,
                )
                await conn.executemany(
                    """
                    INSERT INTO order_item (
                        order_id, seat_id, passenger_name, passenger_phone, discount_type_id,
                        price_amount, discount_amount, promo_discount_amount
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    """,
                    [
                        (
                            order.id,
                            item.seat_id,
                            item.passenger_name,
                            item.passenger_phone,
                            item.discount_type_id,
                            item.price_amount,
                            item.discount_amount,
                            item.promo_discount_amount,
                        )
                        for item in order.items
                    ],
                )

                bound = await self.intent_command_repo.bind_to_order_tx(
                    conn,
                    order_id=order.id,
                    owner_key=order.owner_key,
                    run_id=order.run_id,
                    seat_ids=order.seat_ids,
                    segment=order.segment,
                    expires_at=order.expires_at,
                )
                missing = set(order.seat_ids) - set(bound)
                if missing:
                    raise ConflictError(
                        'Seat holds expired, please select the seats again',
                        code='INTENTS_EXPIRED',
                        seat_ids=sorted(missing),
                    )

                created = await self._fetch(conn, where='id', value=order.id)

        assert created is not None
        Logger.base.info(
            f'🧾 [ORDER] Created {order.id} run={order.run_id} seats={order.seat_ids} '
            f'amount_due={order.amount_due} {order.currency}'
        )
        return created

    @Logger.io
    async def get_by_id(self, *, order_id: UUID) -> Order | None:
        async with (await get_asyncpg_pool()).acquire() as conn:
            return await self._fetch(conn, where='id', value=order_id)

    @Logger.io
    async def get_by_provider_order_id(self, *, provider_order_id: str) -> Order | None:
        async with (await get_asyncpg_pool()).acquire() as conn:
            order_id = await conn.fetchval(
                'SELECT order_id FROM payment WHERE provider_order_id = $1', provider_order_id
            )
            if order_id is None:
                return await self._fetch(conn, where='provider_order_id', value=provider_order_id)
            return await self._fetch(conn, where='id', value=order_id)

    @Logger.io
    async def save_payment_session(self, *, order_id: UUID, session: PaymentSession) -> None:
        async with (await get_asyncpg_pool()).acquire() as conn:
            async with conn.transaction():
                await conn.execute(
                    """
                    UPDATE booking_order
                    SET provider = $2, provider_order_id = $3, payment_url = $4,
                        updated_at = now()
                    WHERE id = $1
                    """,
                    order_id,
                    session.provider,
                    session.provider_order_id,
                    session.payment_url,
                )
                await conn.execute(
                    """
                    INSERT INTO payment (order_id, provider, provider_order_id, amount, status)
                    SELECT id, $2, $3, amount_due, $4 FROM booking_order WHERE id = $1
                    ON CONFLICT (provider_order_id) DO NOTHING
                    """,
                    order_id,
                    session.provider,
                    session.provider_order_id,
                    str(PaymentRecordStatus.PENDING),
                )

    @Logger.io
    async def mark_session_failed(self, *, provider_order_id: str) -> None:
        async with (await get_asyncpg_pool()).acquire() as conn:
            await conn.execute(
                """
                UPDATE payment SET status = $2, updated_at = now()
                WHERE provider_order_id = $1 AND status = $3
                """,
                provider_order_id,
                str(PaymentRecordStatus.FAILED),
                str(PaymentRecordStatus.PENDING),
            )

    @Logger.io
    async def extend_holds(self, *, order_id: UUID, expires_at: datetime) -> Order:
        async with (await get_asyncpg_pool()).acquire() as conn:
            async with conn.transaction():
                order = await self._fetch(conn, where='id', value=order_id, for_update=True)
                if order is None:
                    raise NotFoundError('Order not found')
                order.ensure_pending()

                held = await self.intent_command_repo.extend_for_order_tx(
                    conn, order_id=order_id, expires_at=expires_at
                )
                missing = set(order.seat_ids) - set(held)
                if missing:
                    raise ConflictError(
                        'Seat holds expired, please select the seats again',
                        code='INTENTS_EXPIRED',
                        seat_ids=sorted(missing),
                    )

                await conn.execute(
                    'UPDATE booking_order SET expires_at = $2, updated_at = now() WHERE id = $1',
                    order_id,
                    expires_at,
                )
                updated = await self._fetch(conn, where='id', value=order_id)

        assert updated is not None
        return updated

    @Logger.io
    async def confirm_paid(
        self, *, order_id: UUID, provider: str, provider_order_id: str, amount: Decimal
    ) -> ConfirmResult:
        async with (await get_asyncpg_pool()).acquire() as conn:
            async with conn.transaction():
                order = await self._fetch(conn, where='id', value=order_id, for_update=True)
                if order is None:
                    raise NotFoundError('Order not found')

                if order.status == OrderStatus.PAID:
                    session_status = await conn.fetchval(
                        'SELECT status FROM payment WHERE provider_order_id = $1',
                        provider_order_id,
                    )
                    if session_status == PaymentRecordStatus.PAID:
                        return ConfirmResult(order=order, outcome=ConfirmOutcome.ALREADY_PAID)
                    # Another session already paid this order
                    await self._record_payment(
                        conn,
                        order_id=order_id,
                        provider=provider,
                        provider_order_id=provider_order_id,
                        amount=amount,
                        status=PaymentRecordStatus.REFUND_REQUIRED,
                    )
                    return ConfirmResult(order=order, outcome=ConfirmOutcome.DUPLICATE)

                if order.status != OrderStatus.PENDING:
                    # Money arrived for an order that no longer holds seats: keep a trail
                    await self._record_payment(
                        conn,
                        order_id=order_id,
                        provider=provider,
                        provider_order_id=provider_order_id,
                        amount=amount,
                        status=PaymentRecordStatus.REFUND_REQUIRED,
                    )
                    return ConfirmResult(order=order, outcome=ConfirmOutcome.NOT_PENDING)

                reservations = await self.intent_command_repo.materialize_tx(
                    conn, order_id=order_id
                )

                if order.promo_code_id is not None and reservations:
                    await conn.executemany(
                        """
                        INSERT INTO promo_code_usage (
                            promo_code_id, order_id, reservation_id, phone, discount_amount
                        )
                        VALUES ($1, $2, $3, $4, $5)
                        """,
                        [
                            (
                                order.promo_code_id,
                                order_id,
                                reservations[item.seat_id],
                                order.contact.phone,
                                item.promo_discount_amount,
                            )
                            for item in order.items
                            if item.seat_id in reservations and item.promo_discount_amount > 0
                        ],
                    )

                await self._record_payment(
                    conn,
                    order_id=order_id,
                    provider=provider,
                    provider_order_id=provider_order_id,
                    amount=amount,
                    status=PaymentRecordStatus.PAID,
                )
                await conn.execute(
                    """
                    UPDATE booking_order
                    SET status = 'paid', paid_at = now(), updated_at = now()
                    WHERE id = $1
                    """,
                    order_id,
                )
                paid = await self._fetch(conn, where='id', value=order_id)

        assert paid is not None
        Logger.base.info(f'💰 [ORDER] Paid {order_id}: {len(reservations)} reservation(s)')
        return ConfirmResult(
            order=paid, outcome=ConfirmOutcome.PAID_NOW, reservation_count=len(reservations)
        )

    @staticmethod
    async def _record_payment(
        conn: asyncpg.Connection,
        *,
        order_id: UUID,
        provider: str,
        provider_order_id: str,
        amount: Decimal,
        status: PaymentRecordStatus,
    ) -> None:
        """Upsert the session row; free orders have no session and get their first row here"""
        await conn.execute(
            """
            INSERT INTO payment (order_id, provider, provider_order_id, amount, status)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (provider_order_id) DO UPDATE
            SET status = EXCLUDED.status, amount = EXCLUDED.amount, updated_at = now()
            """,
            order_id,
            provider,
            provider_order_id,
            amount,
            str(status),
        )

    @Logger.io
    async def close(self, *, order_id: UUID, status: OrderStatus) -> Order | None:
        async with (await get_asyncpg_pool()).acquire() as conn:
            async with conn.transaction():
                closed = await conn.fetchval(
                    """
                    UPDATE booking_order SET status = $2, updated_at = now()
                    WHERE id = $1 AND status = 'pending'
                    RETURNING id
                    """,
                    order_id,
                    str(status),
                )
                if closed is None:
                    return None

                released = await self.intent_command_repo.delete_for_order_tx(
                    conn, order_id=order_id
                )
                order = await self._fetch(conn, where='id', value=order_id)

        Logger.base.info(f'🚫 [ORDER] {order_id} -> {status}, holds released: {released}')
        return order
