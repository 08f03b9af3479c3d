from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import LockBusyError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ordering.app.interface.i_expiry_reaper_repo import IExpiryReaperRepo, ReapResult
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType


class ReapExpiredHoldsUseCase:
    """
    One expiry cycle: expire overdue pending orders, purge lapsed holds and holds of
    closed orders, then tell every touched run's room to refresh.

    Only one process in the cluster reaps at a time; the others skip the cycle.
    """

    def __init__(
        self,
        *,
        expiry_reaper_repo: IExpiryReaperRepo,
        run_event_broadcaster: IRunEventBroadcaster,
        grace_seconds: int = settings.REAPER_GRACE_SECONDS,
        recent_payment_seconds: int = settings.REAPER_RECENT_PAYMENT_SECONDS,
    ) -> None:
        self.expiry_reaper_repo = expiry_reaper_repo
        self.run_event_broadcaster = run_event_broadcaster
        self.grace_seconds = grace_seconds
        self.recent_payment_seconds = recent_payment_seconds
        self.tracer = trace.get_tracer(__name__)

    async def execute(self) -> ReapResult:
        with self.tracer.start_as_current_span('use_case.reap_expired_holds'):
            try:
                result = await self.expiry_reaper_repo.reap(
                    grace_seconds=self.grace_seconds,
                    recent_payment_seconds=self.recent_payment_seconds,
                )
            except LockBusyError:
                Logger.base.info('🧹 [REAPER] Another instance is reaping, cycle skipped')
                metrics.record_reaper_cycle(result='skipped')
                return ReapResult(skipped=True)

            metrics.record_reaper_cycle(
                result='ran',
                expired_orders=result.expired_orders,
                expired_intents=result.expired_intents,
                orphan_intents=result.orphan_intents,
            )
            if result.expired_orders:
                metrics.record_order_transition(status='expired', count=result.expired_orders)

            if result.total:
                Logger.base.info(
                    f'🧹 [REAPER] expired_orders={result.expired_orders} '
                    f'expired_intents={result.expired_intents} '
                    f'orphan_intents={result.orphan_intents} runs={sorted(result.run_ids)}'
                )

            for run_id in sorted(result.run_ids):
                await self.run_event_broadcaster.publish(
                    run_id=run_id, event=RunEventType.INTENTS_UPDATE
                )
            return result
