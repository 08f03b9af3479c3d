"""
Stream Run Events Use Case

SSE room per run: a `connected` frame, then every refresh hint published for the run.
Clients re-fetch the seat map on `intents:update` / `trip:update`; hints carry no seat
data and no owner identity.
"""

from collections.abc import AsyncGenerator
from typing import Any, Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_seat_inventory_query_repo import (
    ISeatInventoryQueryRepo,
)
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster


class StreamRunEventsUseCase:
    def __init__(
        self,
        *,
        seat_inventory_query_repo: ISeatInventoryQueryRepo,
        run_event_broadcaster: IRunEventBroadcaster,
    ) -> None:
        self.seat_inventory_query_repo = seat_inventory_query_repo
        self.run_event_broadcaster = run_event_broadcaster

    @classmethod
    @inject
    def depends(
        cls,
        seat_inventory_query_repo: ISeatInventoryQueryRepo = Depends(
            Provide[Container.seat_inventory_query_repo]
        ),
        run_event_broadcaster: IRunEventBroadcaster = Depends(
            Provide[Container.run_event_broadcaster]
        ),
    ) -> Self:
        return cls(
            seat_inventory_query_repo=seat_inventory_query_repo,
            run_event_broadcaster=run_event_broadcaster,
        )

    async def ensure_run(self, *, run_id: int) -> None:
        if await self.seat_inventory_query_repo.get_run(run_id=run_id) is None:
            raise NotFoundError('Run not found')

    async def stream(self, *, run_id: int) -> AsyncGenerator[dict[str, Any], None]:
        try:
            yield {'event': 'connected', 'run_id': run_id}

            async for payload in self.run_event_broadcaster.subscribe(run_id=run_id):
                yield payload

        except anyio.get_cancelled_exc_class():
            Logger.base.info(f'[SSE] Client disconnected from run {run_id}')
            raise
        except Exception as e:
            Logger.base.error(f'[SSE] Error in stream for run {run_id}: {type(e).__name__}: {e}')
            raise
