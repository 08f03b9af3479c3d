from collections.abc import Sequence
from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError, GatewayError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.inventory.app.interface.i_seat_inventory_query_repo import (
    ISeatInventoryQueryRepo,
)
from src.service.ordering.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.ordering.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ordering.domain.entity.order_entity import Order, OrderItem
from src.service.ordering.domain.enum.order_status import OrderStatus
from src.service.ordering.domain.value_object.contact import Contact
from src.service.promotion.app.interface.i_fare_query_repo import IFareQueryRepo
from src.service.promotion.app.query.quote_fare_use_case import (
    PassengerRequest,
    QuoteFareUseCase,
)
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType
from src.service.shared_kernel.domain.value_object.requester import Requester
from src.service.shared_kernel.domain.value_object.segment import resolve_segment


FREE_PROVIDER = 'free'


@attrs.frozen
class PassengerInput:
    seat_id: int
    name: str
    discount_type_id: Optional[int] = None
    phone: Optional[str] = None


@attrs.frozen
class CheckoutResult:
    order: Order
    payment_url: Optional[str] = None


class CreateOrderUseCase:
    """
    Checkout: turn the requester's live holds into a pending order and open a payment.

    Flow:
    1. Validate contact, run and segment
    2. Price passengers (discount types, then promo code)
    3. Persist order + items and bind the holds atomically
    4. Zero amount due -> confirm right away; otherwise register a payment session

    A provider failure leaves the order pending with its holds bound until the order
    deadline, so the shopper can retry the payment.
    """

    def __init__(
        self,
        *,
        seat_inventory_query_repo: ISeatInventoryQueryRepo,
        fare_query_repo: IFareQueryRepo,
        order_command_repo: IOrderCommandRepo,
        payment_gateway: IPaymentGateway,
        run_event_broadcaster: IRunEventBroadcaster,
        ttl_seconds: int = settings.ORDER_TTL_SECONDS,
    ) -> None:
        self.quote_fare = QuoteFareUseCase(
            seat_inventory_query_repo=seat_inventory_query_repo,
            fare_query_repo=fare_query_repo,
        )
        self.order_command_repo = order_command_repo
        self.payment_gateway = payment_gateway
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
        fare_query_repo: IFareQueryRepo = Depends(Provide[Container.fare_query_repo]),
        order_command_repo: IOrderCommandRepo = Depends(Provide[Container.order_command_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        run_event_broadcaster: IRunEventBroadcaster = Depends(
            Provide[Container.run_event_broadcaster]
        ),
    ) -> Self:
        return cls(
            seat_inventory_query_repo=seat_inventory_query_repo,
            fare_query_repo=fare_query_repo,
            order_command_repo=order_command_repo,
            payment_gateway=payment_gateway,
            run_event_broadcaster=run_event_broadcaster,
        )

    @Logger.io
    async def execute(
        self,
        *,
        run_id: int,
        board_station_id: int,
        exit_station_id: int,
        passengers: Sequence[PassengerInput],
        contact_name: str,
        contact_phone: str,
        contact_email: str,
        requester: Requester,
        promo_code: Optional[str] = None,
    ) -> CheckoutResult:
        with self.tracer.start_as_current_span(
            'use_case.create_order',
            attributes={'run.id': run_id, 'passengers': len(passengers)},
        ):
            contact = Contact.create(name=contact_name, phone=contact_phone, email=contact_email)

            run = await self.quote_fare.get_run(run_id=run_id)
            if run.boarding_started:
                raise ConflictError('Boarding has started for this run', code='BOARDING_STARTED')
            segment = resolve_segment(
                run.stations,
                board_station_id=board_station_id,
                exit_station_id=exit_station_id,
            )

            quote = await self.quote_fare.quote(
                run=run,
                board_station_id=board_station_id,
                exit_station_id=exit_station_id,
                passengers=[
                    PassengerRequest(seat_id=p.seat_id, discount_type_id=p.discount_type_id)
                    for p in passengers
                ],
                promo_code=promo_code or None,
                phone=contact.phone,
            )
            if quote.promo is not None:
                quote.promo.raise_if_invalid()

            by_seat = {p.seat_id: p for p in passengers}
            items = [
                OrderItem(
                    seat_id=seat.seat_id,
                    passenger_name=by_seat[seat.seat_id].name.strip(),
                    passenger_phone=by_seat[seat.seat_id].phone,
                    price_amount=seat.price_amount,
                    discount_type_id=seat.discount_type_id,
                    discount_amount=seat.discount_amount,
                    promo_discount_amount=seat.promo_discount_amount,
                )
                for seat in quote.seats
            ]

            order = Order.create(
                owner_key=requester.owner_key,
                run_id=run_id,
                board_station_id=board_station_id,
                exit_station_id=exit_station_id,
                segment=segment,
                contact=contact,
                items=items,
                subtotal=quote.subtotal,
                discount_total=quote.discount_total,
                amount_due=quote.amount_due,
                currency=settings.CURRENCY,
                ttl_seconds=self.ttl_seconds,
                promo_code_id=quote.promo.promo_code_id if quote.promo else None,
                promo_code=quote.promo.code if quote.promo else None,
            )
            order = await self.order_command_repo.create_with_holds(order=order)
            metrics.record_order_transition(status=str(OrderStatus.PENDING))

            if order.is_free:
                return await self._confirm_free(order)

            try:
                session = await self.payment_gateway.create_session(order=order)
            except GatewayError as e:
                Logger.base.warning(
                    f'💳 [CHECKOUT] Payment session failed for {order.id}, order stays pending'
                )
                raise GatewayError(e.message, order_id=str(order.id))

            await self.order_command_repo.save_payment_session(order_id=order.id, session=session)
            order = order.with_payment_session(session)
            Logger.base.info(f'💳 [CHECKOUT] {order.id} -> {session.provider_order_id}')
            return CheckoutResult(order=order, payment_url=session.payment_url)

    async def _confirm_free(self, order: Order) -> CheckoutResult:
        result = await self.order_command_repo.confirm_paid(
            order_id=order.id,
            provider=FREE_PROVIDER,
            provider_order_id=f'{FREE_PROVIDER}-{order.id}',
            amount=order.amount_due,
        )
        metrics.record_order_transition(status=str(OrderStatus.PAID))
        await self.run_event_broadcaster.publish(
            run_id=order.run_id, event=RunEventType.INTENTS_UPDATE
        )
        return CheckoutResult(order=result.order)
