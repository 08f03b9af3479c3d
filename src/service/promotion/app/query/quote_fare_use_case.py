from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_seat_inventory_query_repo import (
    ISeatInventoryQueryRepo,
)
from src.service.inventory.domain.value_object.seat_map import RunInfo
from src.service.promotion.app.interface.i_fare_query_repo import IFareQueryRepo
from src.service.promotion.domain.order_pricing_domain import (
    OrderQuote,
    PassengerFare,
    quote_order,
)
from src.service.promotion.domain.promo_rules import PromoContext, normalize_code
from src.service.shared_kernel.domain.value_object.segment import resolve_segment


@attrs.frozen
class PassengerRequest:
    seat_id: int
    discount_type_id: Optional[int] = None


class QuoteFareUseCase:
    """
    Price a set of passengers on a run segment, optionally with a promo code.

    Used by the promo validation endpoint and by order checkout; both see exactly the
    same amounts.
    """

    def __init__(
        self,
        *,
        seat_inventory_query_repo: ISeatInventoryQueryRepo,
        fare_query_repo: IFareQueryRepo,
    ) -> None:
        self.seat_inventory_query_repo = seat_inventory_query_repo
        self.fare_query_repo = fare_query_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        seat_inventory_query_repo: ISeatInventoryQueryRepo = Depends(
            Provide[Container.seat_inventory_query_repo]
        ),
        fare_query_repo: IFareQueryRepo = Depends(Provide[Container.fare_query_repo]),
    ) -> Self:
        return cls(
            seat_inventory_query_repo=seat_inventory_query_repo,
            fare_query_repo=fare_query_repo,
        )

    async def get_run(self, *, run_id: int) -> RunInfo:
        run = await self.seat_inventory_query_repo.get_run(run_id=run_id)
        if run is None:
            raise NotFoundError('Run not found')
        return run

    @Logger.io
    async def quote(
        self,
        *,
        run: RunInfo,
        board_station_id: int,
        exit_station_id: int,
        passengers: Sequence[PassengerRequest],
        promo_code: Optional[str] = None,
        phone: Optional[str] = None,
        channel: str = settings.SALES_CHANNEL,
    ) -> OrderQuote:
        with self.tracer.start_as_current_span(
            'use_case.quote_fare', attributes={'run.id': run.id, 'passengers': len(passengers)}
        ):
            if not passengers:
                raise ValidationError('At least one passenger is required')
            resolve_segment(
                run.stations,
                board_station_id=board_station_id,
                exit_station_id=exit_station_id,
            )

            unit_price = await self.fare_query_repo.get_segment_price(
                route_id=run.route_id,
                from_station_id=board_station_id,
                to_station_id=exit_station_id,
                on_date=run.run_date,
            )
            if unit_price is None:
                raise NotFoundError('No fare configured for this segment')

            requested_types = {p.discount_type_id for p in passengers if p.discount_type_id}
            discount_types = await self.fare_query_repo.get_online_discount_types(
                route_schedule_id=run.route_schedule_id, discount_type_ids=requested_types
            )
            missing = requested_types - discount_types.keys()
            if missing:
                raise ValidationError(
                    f'Discount type not available for this departure: {sorted(missing)}'
                )

            fares = [
                PassengerFare(
                    seat_id=p.seat_id,
                    discount_type=discount_types.get(p.discount_type_id)
                    if p.discount_type_id
                    else None,
                )
                for p in passengers
            ]

            if promo_code is None:
                return quote_order(unit_price=unit_price, passengers=fares)

            code = normalize_code(promo_code)
            promo = (
                await self.fare_query_repo.get_promo_code(code=code, phone=phone) if code else None
            )
            context = PromoContext(
                code=code,
                now=datetime.now(timezone.utc),
                channel=channel,
                route_id=run.route_id,
                route_schedule_id=run.route_schedule_id,
                departure_time=run.departure_time,
                travel_date=run.run_date,
                phone=phone,
            )
            return quote_order(
                unit_price=unit_price, passengers=fares, promo=promo, promo_context=context
            )
