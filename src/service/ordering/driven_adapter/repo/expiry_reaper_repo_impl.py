"""
Expiry Reaper Repository (asyncpg)

Runs on the connection that owns the session advisory lock, so only one process in the
cluster reaps at a time and every statement sees the same database clock.
"""

from src.platform.logging.loguru_io import Logger
from src.platform.state.advisory_lock import AdvisoryLock
from src.service.ordering.app.interface.i_expiry_reaper_repo import IExpiryReaperRepo, ReapResult


class ExpiryReaperRepoImpl(IExpiryReaperRepo):
    def __init__(self, *, lock: AdvisoryLock) -> None:
        self.lock = lock

    @Logger.io
    async def reap(self, *, grace_seconds: int, recent_payment_seconds: int) -> ReapResult:
        async with self.lock.hold() as conn:
            async with conn.transaction():
                # (a) pending orders past deadline + grace, unless a payment session is fresh
                expired_orders = await conn.fetch(
                    """
                    UPDATE booking_order o
                    SET status = 'expired', updated_at = now()
                    WHERE o.status = 'pending'
                      AND o.expires_at + $1::int * interval '1 second' < now()
                      AND NOT EXISTS (
                          SELECT 1 FROM payment p
                          WHERE p.order_id = o.id
                            AND p.updated_at > now() - $2::int * interval '1 second'
                      )
                    RETURNING o.run_id
                    """,
                    grace_seconds,
                    recent_payment_seconds,
                )

                # (b) lapsed holds
                expired_intents = await conn.fetch(
                    'DELETE FROM seat_intent WHERE expires_at <= now() RETURNING run_id'
                )

                # (c) holds still attached to closed orders
                orphan_intents = await conn.fetch(
                    """
                    DELETE FROM seat_intent si
                    USING booking_order o
                    WHERE si.order_id = o.id
                      AND o.status IN ('paid', 'failed', 'expired', 'cancelled')
                    RETURNING si.run_id
                    """
                )

        run_ids = frozenset(
            row['run_id'] for row in (*expired_orders, *expired_intents, *orphan_intents)
        )
        return ReapResult(
            expired_orders=len(expired_orders),
            expired_intents=len(expired_intents),
            orphan_intents=len(orphan_intents),
            run_ids=run_ids,
        )
