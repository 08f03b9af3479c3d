from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.inventory.app.interface.i_intent_command_repo import IIntentCommandRepo
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType
from src.service.shared_kernel.domain.value_object.requester import Requester


class ReleaseIntentUseCase:
    """Drop the requester's own hold on a seat. Releasing nothing is not an error."""

    def __init__(
        self,
        *,
        intent_command_repo: IIntentCommandRepo,
        run_event_broadcaster: IRunEventBroadcaster,
    ) -> None:
        self.intent_command_repo = intent_command_repo
        self.run_event_broadcaster = run_event_broadcaster
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        intent_command_repo: IIntentCommandRepo = Depends(Provide[Container.intent_command_repo]),
        run_event_broadcaster: IRunEventBroadcaster = Depends(
            Provide[Container.run_event_broadcaster]
        ),
    ) -> Self:
        return cls(
            intent_command_repo=intent_command_repo,
            run_event_broadcaster=run_event_broadcaster,
        )

    @Logger.io
    async def execute(self, *, run_id: int, seat_id: int, requester: Requester) -> bool:
        with self.tracer.start_as_current_span(
            'use_case.release_intent',
            attributes={'run.id': run_id, 'seat.id': seat_id},
        ):
            removed = await self.intent_command_repo.release(
                run_id=run_id, seat_id=seat_id, owner_key=requester.owner_key
            )
            metrics.record_intent(action='release', result='released' if removed else 'noop')

            if removed:
                await self.run_event_broadcaster.publish(
                    run_id=run_id, event=RunEventType.INTENTS_UPDATE
                )
            return removed > 0
