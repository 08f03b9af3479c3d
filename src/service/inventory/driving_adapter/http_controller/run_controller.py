from collections.abc import AsyncGenerator
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace
import orjson
from sse_starlette.sse import EventSourceResponse

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.command.create_intent_use_case import CreateIntentUseCase
from src.service.inventory.app.command.release_intent_use_case import ReleaseIntentUseCase
from src.service.inventory.app.command.set_boarding_state_use_case import (
    SetBoardingStateUseCase,
)
from src.service.inventory.app.query.get_seat_map_use_case import GetSeatMapUseCase
from src.service.inventory.app.query.list_my_intents_use_case import ListMyIntentsUseCase
from src.service.inventory.app.query.stream_run_events_use_case import StreamRunEventsUseCase
from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent
from src.service.inventory.driving_adapter.http_controller.schema.run_schema import (
    BoardingRequest,
    BoardingResponse,
    IntentCreateRequest,
    IntentReleaseResponse,
    IntentResponse,
    SeatMapResponse,
    SeatResponse,
    StationResponse,
)
from src.service.shared_kernel.domain.value_object.requester import Requester
from src.service.shared_kernel.driving_adapter.auth.requester_auth import (
    get_requester,
    require_operator,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _intent_response(intent: SeatIntent, *, renewed: bool = False) -> IntentResponse:
    return IntentResponse(
        seat_id=intent.seat_id,
        board_station_id=intent.board_station_id,
        exit_station_id=intent.exit_station_id,
        board_pos=intent.segment.board_pos,
        exit_pos=intent.segment.exit_pos,
        expires_at=intent.expires_at,
        bound_to_order=intent.is_bound(),
        renewed=renewed,
    )


@router.get('/{run_id}/seat-map')
@Logger.io
async def get_seat_map(
    run_id: int,
    board_station_id: int = Query(..., gt=0),
    exit_station_id: int = Query(..., gt=0),
    requester: Requester = Depends(get_requester),
    use_case: GetSeatMapUseCase = Depends(GetSeatMapUseCase.depends),
) -> SeatMapResponse:
    seat_map = await use_case.execute(
        run_id=run_id,
        board_station_id=board_station_id,
        exit_station_id=exit_station_id,
        requester=requester,
    )
    run = seat_map.run
    return SeatMapResponse(
        run_id=run.id,
        run_date=run.run_date,
        departure_time=run.departure_time,
        direction=run.direction,
        boarding_started=run.boarding_started,
        board_pos=seat_map.segment.board_pos,
        exit_pos=seat_map.segment.exit_pos,
        free_count=seat_map.free_count,
        free_by_vehicle=seat_map.free_count_by_vehicle(),
        stations=[
            StationResponse(station_id=s.station_id, position=s.position, name=s.name)
            for s in run.stations
        ],
        seats=[
            SeatResponse(
                seat_id=seat.seat_id,
                vehicle_id=seat.vehicle_id,
                label=seat.label,
                row=seat.row,
                col=seat.col,
                seat_type=str(seat.seat_type),
                status=str(seat.status),
                hold_status=str(seat.hold_status) if seat.hold_status else None,
                selectable=seat.selectable,
            )
            for seat in seat_map.seats
        ],
    )


@router.get('/{run_id}/intents')
@Logger.io
async def list_my_intents(
    run_id: int,
    requester: Requester = Depends(get_requester),
    use_case: ListMyIntentsUseCase = Depends(ListMyIntentsUseCase.depends),
) -> list[IntentResponse]:
    intents = await use_case.execute(run_id=run_id, requester=requester)
    return [_intent_response(intent) for intent in intents]


@router.post('/{run_id}/intents', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_intent(
    run_id: int,
    request: IntentCreateRequest,
    requester: Requester = Depends(get_requester),
    use_case: CreateIntentUseCase = Depends(CreateIntentUseCase.depends),
) -> IntentResponse:
    with tracer.start_as_current_span('controller.create_intent') as span:
        span.set_attribute('run.id', run_id)
        span.set_attribute('seat.id', request.seat_id)

        result = await use_case.execute(
            run_id=run_id,
            seat_id=request.seat_id,
            board_station_id=request.board_station_id,
            exit_station_id=request.exit_station_id,
            requester=requester,
        )
        return _intent_response(result.intent, renewed=result.renewed)


@router.delete('/{run_id}/intents/{seat_id}')
@Logger.io
async def release_intent(
    run_id: int,
    seat_id: int,
    requester: Requester = Depends(get_requester),
    use_case: ReleaseIntentUseCase = Depends(ReleaseIntentUseCase.depends),
) -> IntentReleaseResponse:
    released = await use_case.execute(run_id=run_id, seat_id=seat_id, requester=requester)
    return IntentReleaseResponse(released=released)


@router.get('/{run_id}/events', status_code=status.HTTP_200_OK)
@Logger.io
async def stream_run_events(
    run_id: int,
    use_case: StreamRunEventsUseCase = Depends(StreamRunEventsUseCase.depends),
) -> EventSourceResponse:
    """SSE room of a run: refresh hints for seat maps (via Redis Pub/Sub subscribe)."""
    await use_case.ensure_run(run_id=run_id)

    async def event_generator() -> AsyncGenerator[dict[str, Any], None]:
        async for payload in use_case.stream(run_id=run_id):
            yield {
                'event': payload.get('event', 'message'),
                'data': orjson.dumps(payload).decode(),
            }

    return EventSourceResponse(event_generator(), ping=settings.SSE_PING_SECONDS)


@router.post('/{run_id}/boarding')
@Logger.io
async def set_boarding_state(
    run_id: int,
    request: BoardingRequest,
    _operator: dict[str, Any] = Depends(require_operator),
    use_case: SetBoardingStateUseCase = Depends(SetBoardingStateUseCase.depends),
) -> BoardingResponse:
    await use_case.execute(run_id=run_id, started=request.started)
    return BoardingResponse(run_id=run_id, boarding_started=request.started)
