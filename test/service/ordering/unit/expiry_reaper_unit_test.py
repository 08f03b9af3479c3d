from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import LockBusyError
from src.service.ordering.app.command.reap_expired_holds_use_case import (
    ReapExpiredHoldsUseCase,
)
from src.service.ordering.app.interface.i_expiry_reaper_repo import ReapResult
from src.service.ordering.driving_adapter.job.expiry_reaper_job import ExpiryReaperJob
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType


class TestReapExpiredHolds:
    @pytest.fixture
    def reaper_repo(self):
        return AsyncMock()

    @pytest.fixture
    def use_case(self, reaper_repo, broadcaster):
        return ReapExpiredHoldsUseCase(
            expiry_reaper_repo=reaper_repo,
            run_event_broadcaster=broadcaster,
            grace_seconds=120,
            recent_payment_seconds=900,
        )

    async def test_counts_and_notifies_each_touched_run(self, use_case, reaper_repo, broadcaster):
        reaper_repo.reap = AsyncMock(
            return_value=ReapResult(
                expired_orders=1,
                expired_intents=3,
                orphan_intents=2,
                run_ids=frozenset({9, 7}),
            )
        )

        result = await use_case.execute()

        assert result.total == 6
        reaper_repo.reap.assert_awaited_once_with(grace_seconds=120, recent_payment_seconds=900)
        assert [call.kwargs for call in broadcaster.publish.await_args_list] == [
            {'run_id': 7, 'event': RunEventType.INTENTS_UPDATE},
            {'run_id': 9, 'event': RunEventType.INTENTS_UPDATE},
        ]

    async def test_nothing_to_do(self, use_case, reaper_repo, broadcaster):
        reaper_repo.reap = AsyncMock(return_value=ReapResult())

        result = await use_case.execute()

        assert result.total == 0
        assert result.skipped is False
        broadcaster.publish.assert_not_awaited()

    async def test_lock_busy_skips_cycle(self, use_case, reaper_repo, broadcaster):
        reaper_repo.reap = AsyncMock(side_effect=LockBusyError('booking_expiry_reaper'))

        result = await use_case.execute()

        assert result.skipped is True
        assert result.total == 0
        broadcaster.publish.assert_not_awaited()


class TestExpiryReaperJob:
    async def test_failed_cycle_is_contained(self):
        use_case = AsyncMock()
        use_case.execute = AsyncMock(side_effect=RuntimeError('db down'))
        job = ExpiryReaperJob(use_case=use_case, interval_seconds=60)

        await job.run_once()

        use_case.execute.assert_awaited_once()
