from datetime import datetime, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_seat_inventory_query_repo import (
    ISeatInventoryQueryRepo,
)
from src.service.inventory.domain.seat_availability_domain import compose_seat_map
from src.service.inventory.domain.value_object.seat_map import SeatMap
from src.service.shared_kernel.domain.value_object.requester import Requester
from src.service.shared_kernel.domain.value_object.segment import resolve_segment


class GetSeatMapUseCase:
    def __init__(self, *, seat_inventory_query_repo: ISeatInventoryQueryRepo) -> None:
        self.seat_inventory_query_repo = seat_inventory_query_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        seat_inventory_query_repo: ISeatInventoryQueryRepo = Depends(
            Provide[Container.seat_inventory_query_repo]
        ),
    ) -> Self:
        return cls(seat_inventory_query_repo=seat_inventory_query_repo)

    @Logger.io
    async def execute(
        self,
        *,
        run_id: int,
        board_station_id: int,
        exit_station_id: int,
        requester: Requester,
    ) -> SeatMap:
        with self.tracer.start_as_current_span(
            'use_case.get_seat_map', attributes={'run.id': run_id}
        ):
            run = await self.seat_inventory_query_repo.get_run(run_id=run_id)
            if run is None:
                raise NotFoundError('Run not found')

            segment = resolve_segment(
                run.stations,
                board_station_id=board_station_id,
                exit_station_id=exit_station_id,
            )
            seats = await self.seat_inventory_query_repo.list_seats(
                run_id=run_id, route_schedule_id=run.route_schedule_id
            )
            occupancies = await self.seat_inventory_query_repo.list_occupancies(run_id=run_id)

            return compose_seat_map(
                run=run,
                seats=seats,
                occupancies=occupancies,
                segment=segment,
                owner_key=requester.owner_key,
                now=datetime.now(timezone.utc),
            )
