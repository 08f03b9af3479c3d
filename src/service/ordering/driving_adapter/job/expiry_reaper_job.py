import anyio
from anyio.abc import TaskGroup

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ordering.app.command.reap_expired_holds_use_case import (
    ReapExpiredHoldsUseCase,
)


class ExpiryReaperJob:
    """Run the expiry cycle every `interval_seconds` inside the app's task group"""

    def __init__(self, *, use_case: ReapExpiredHoldsUseCase, interval_seconds: float) -> None:
        self.use_case = use_case
        self.interval_seconds = interval_seconds

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self._loop)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(f'🧹 [REAPER] Started, interval={self.interval_seconds}s')

    async def run_once(self) -> None:
        try:
            await self.use_case.execute()
        except Exception as e:
            # A failed cycle must not stop the next one
            metrics.record_reaper_cycle(result='error')
            Logger.base.error(f'❌ [REAPER] Cycle failed: {type(e).__name__}: {e}')

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await anyio.sleep(self.interval_seconds)
