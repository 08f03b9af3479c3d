from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError, NotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.inventory.app.interface.i_intent_command_repo import (
    IIntentCommandRepo,
    IntentWriteResult,
)
from src.service.inventory.app.interface.i_seat_inventory_query_repo import (
    ISeatInventoryQueryRepo,
)
from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType
from src.service.shared_kernel.domain.value_object.requester import Requester
from src.service.shared_kernel.domain.value_object.segment import resolve_segment


class CreateIntentUseCase:
    """
    Place (or renew) a short-lived hold on one seat for a segment.

    Flow:
    1. Resolve the run and the segment from board/exit stations
    2. Reject seats that are not sold online
    3. Create or renew the hold atomically (conflicts surface as ConflictError)
    4. Notify the run's room so other seat maps refresh
    """

    def __init__(
        self,
        *,
        seat_inventory_query_repo: ISeatInventoryQueryRepo,
        intent_command_repo: IIntentCommandRepo,
        run_event_broadcaster: IRunEventBroadcaster,
        ttl_seconds: int = settings.INTENT_TTL_SECONDS,
    ) -> None:
        self.seat_inventory_query_repo = seat_inventory_query_repo
        self.intent_command_repo = intent_command_repo
        self.run_event_broadcaster = run_event_broadcaster
        self.ttl_seconds = ttl_seconds
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        seat_inventory_query_repo: ISeatInventoryQueryRepo = Depends(
            Provide[Container.seat_inventory_query_repo]
        ),
        intent_command_repo: IIntentCommandRepo = Depends(Provide[Container.intent_command_repo]),
        run_event_broadcaster: IRunEventBroadcaster = Depends(
            Provide[Container.run_event_broadcaster]
        ),
    ) -> Self:
        return cls(
            seat_inventory_query_repo=seat_inventory_query_repo,
            intent_command_repo=intent_command_repo,
            run_event_broadcaster=run_event_broadcaster,
        )

    @Logger.io
    async def execute(
        self,
        *,
        run_id: int,
        seat_id: int,
        board_station_id: int,
        exit_station_id: int,
        requester: Requester,
    ) -> IntentWriteResult:
        with self.tracer.start_as_current_span(
            'use_case.create_intent',
            attributes={'run.id': run_id, 'seat.id': seat_id},
        ):
            run = await self.seat_inventory_query_repo.get_run(run_id=run_id)
            if run is None:
                raise NotFoundError('Run not found')
            if run.boarding_started:
                raise ConflictError('Boarding has started for this run', code='BOARDING_STARTED')

            segment = resolve_segment(
                run.stations,
                board_station_id=board_station_id,
                exit_station_id=exit_station_id,
            )

            seats = await self.seat_inventory_query_repo.list_seats(
                run_id=run_id, route_schedule_id=run.route_schedule_id
            )
            seat = next((s for s in seats if s.id == seat_id), None)
            if seat is None:
                raise NotFoundError('Seat not found on this run')
            if not seat.is_bookable_type:
                raise ValidationError(f'Seat type {seat.seat_type} cannot be booked')
            if seat.blocked_online:
                raise ConflictError('Seat is not sold online', code='SEAT_BLOCKED')

            intent = SeatIntent.create(
                run_id=run_id,
                seat_id=seat_id,
                owner_key=requester.owner_key,
                board_station_id=board_station_id,
                exit_station_id=exit_station_id,
                segment=segment,
                ttl_seconds=self.ttl_seconds,
            )
            try:
                result = await self.intent_command_repo.create(
                    intent=intent, ttl_seconds=self.ttl_seconds
                )
            except ConflictError as e:
                metrics.record_intent(action='create', result=e.code.lower())
                raise

            metrics.record_intent(action='create', result='renewed' if result.renewed else 'created')
            await self.run_event_broadcaster.publish(
                run_id=run_id, event=RunEventType.INTENTS_UPDATE
            )
            return result
