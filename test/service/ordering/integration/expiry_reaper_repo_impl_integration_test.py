"""
Integration tests for ExpiryReaperRepoImpl

One cleanup cycle against real PostgreSQL: overdue orders past the grace period,
lapsed holds and holds left on closed orders. An order whose payment session is still
fresh survives even when its deadline and grace have passed.
"""

import pytest

from src.platform.exception.exceptions import LockBusyError
from src.platform.state.advisory_lock import AdvisoryLock
from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent
from src.service.ordering.domain.value_object.payment_session import PaymentSession
from src.service.ordering.driven_adapter.repo.expiry_reaper_repo_impl import (
    ExpiryReaperRepoImpl,
)
from src.service.shared_kernel.domain.value_object.segment import Segment


GRACE = 120
RECENT_PAYMENT = 900


async def _age_order(pg_conn, order_id, *, seconds_past_deadline: int) -> None:
    """Move the order deadline (and its bound holds) into the past"""
    await pg_conn.execute(
        "UPDATE booking_order SET expires_at = now() - $2::int * interval '1 second' "
        'WHERE id = $1',
        order_id,
        seconds_past_deadline,
    )
    await pg_conn.execute(
        "UPDATE seat_intent SET expires_at = now() - $2::int * interval '1 second' "
        'WHERE order_id = $1',
        order_id,
        seconds_past_deadline,
    )


async def _status(pg_conn, order_id) -> str:
    return await pg_conn.fetchval('SELECT status FROM booking_order WHERE id = $1', order_id)


@pytest.mark.integration
class TestReap:
    @pytest.fixture
    def lock(self) -> AdvisoryLock:
        return AdvisoryLock(name='test-expiry-reaper')

    @pytest.fixture
    def reaper(self, lock) -> ExpiryReaperRepoImpl:
        return ExpiryReaperRepoImpl(lock=lock)

    async def _reap(self, reaper):
        return await reaper.reap(grace_seconds=GRACE, recent_payment_seconds=RECENT_PAYMENT)

    async def test_order_past_grace_expires(self, reaper, checkout, seeded_run, pg_conn):
        order = await checkout()
        await _age_order(pg_conn, order.id, seconds_past_deadline=GRACE + 30)

        result = await self._reap(reaper)

        assert result.expired_orders == 1
        assert result.expired_intents == 2
        assert result.run_ids == frozenset({seeded_run['run_id']})
        assert await _status(pg_conn, order.id) == 'expired'
        assert await pg_conn.fetchval('SELECT count(*) FROM seat_intent') == 0

    async def test_order_within_grace_survives(self, reaper, checkout, pg_conn):
        order = await checkout()
        await _age_order(pg_conn, order.id, seconds_past_deadline=GRACE - 30)

        result = await self._reap(reaper)

        assert result.expired_orders == 0
        assert await _status(pg_conn, order.id) == 'pending'

    async def test_fresh_payment_session_spares_order(self, reaper, checkout, order_repo, pg_conn):
        order = await checkout()
        await order_repo.save_payment_session(
            order_id=order.id,
            session=PaymentSession(
                provider='ipay', provider_order_id='prov-1', payment_url='https://pay/1'
            ),
        )
        await _age_order(pg_conn, order.id, seconds_past_deadline=GRACE + 30)

        result = await self._reap(reaper)

        assert result.expired_orders == 0
        assert await _status(pg_conn, order.id) == 'pending'

    async def test_stale_payment_session_does_not_spare_order(
        self, reaper, checkout, order_repo, pg_conn
    ):
        order = await checkout()
        await order_repo.save_payment_session(
            order_id=order.id,
            session=PaymentSession(
                provider='ipay', provider_order_id='prov-1', payment_url='https://pay/1'
            ),
        )
        await pg_conn.execute(
            "UPDATE payment SET updated_at = now() - $1::int * interval '1 second'",
            RECENT_PAYMENT + 60,
        )
        await _age_order(pg_conn, order.id, seconds_past_deadline=GRACE + 30)

        result = await self._reap(reaper)

        assert result.expired_orders == 1
        assert await _status(pg_conn, order.id) == 'expired'

    async def test_lapsed_unbound_hold_removed_live_one_kept(
        self, reaper, intent_repo, seeded_run, pg_conn
    ):
        for seat_id in seeded_run['seat_ids'][:2]:
            await intent_repo.create(
                intent=SeatIntent.create(
                    run_id=seeded_run['run_id'],
                    seat_id=seat_id,
                    owner_key='user:42',
                    board_station_id=seeded_run['station_ids'][0],
                    exit_station_id=seeded_run['station_ids'][1],
                    segment=Segment(board_pos=0, exit_pos=1),
                    ttl_seconds=60,
                ),
                ttl_seconds=60,
            )
        await pg_conn.execute(
            "UPDATE seat_intent SET expires_at = now() - interval '1 second' WHERE seat_id = $1",
            seeded_run['seat_ids'][0],
        )

        result = await self._reap(reaper)

        remaining = await pg_conn.fetch('SELECT seat_id FROM seat_intent')
        assert result.expired_intents == 1
        assert [row['seat_id'] for row in remaining] == [seeded_run['seat_ids'][1]]

    async def test_holds_of_closed_order_are_orphans(self, reaper, checkout, pg_conn):
        order = await checkout()
        # Closed without going through close(), so its live holds stay behind
        await pg_conn.execute(
            "UPDATE booking_order SET status = 'cancelled' WHERE id = $1", order.id
        )

        result = await self._reap(reaper)

        assert result.orphan_intents == 2
        assert result.expired_orders == 0
        assert await pg_conn.fetchval('SELECT count(*) FROM seat_intent') == 0

    async def test_busy_lock_skips_cycle(self, reaper, lock, checkout, pg_conn):
        order = await checkout()
        await _age_order(pg_conn, order.id, seconds_past_deadline=GRACE + 30)

        async with lock.hold():
            with pytest.raises(LockBusyError):
                await self._reap(reaper)

        assert await _status(pg_conn, order.id) == 'pending'
