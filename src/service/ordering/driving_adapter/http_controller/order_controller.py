from typing import Optional

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.ordering.app.command.cancel_order_use_case import CancelOrderUseCase
from src.service.ordering.app.command.create_order_use_case import (
    CreateOrderUseCase,
    PassengerInput,
)
from src.service.ordering.app.command.retry_payment_use_case import RetryPaymentUseCase
from src.service.ordering.app.query.get_order_status_use_case import GetOrderStatusUseCase
from src.service.ordering.domain.entity.order_entity import Order
from src.service.ordering.driving_adapter.http_controller.schema.order_schema import (
    OrderCreateRequest,
    OrderItemResponse,
    OrderResponse,
    OrderStatusResponse,
)
from src.service.shared_kernel.domain.value_object.requester import Requester
from src.service.shared_kernel.driving_adapter.auth.requester_auth import get_requester


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _order_response(order: Order, *, payment_url: Optional[str] = None) -> OrderResponse:
    return OrderResponse(
        order_id=order.id,
        status=str(order.status),
        run_id=order.run_id,
        subtotal=order.subtotal,
        discount_total=order.discount_total,
        amount_due=order.amount_due,
        currency=order.currency,
        expires_at=order.expires_at,
        promo_code=order.promo_code,
        payment_url=payment_url,
        items=[
            OrderItemResponse(
                seat_id=item.seat_id,
                passenger_name=item.passenger_name,
                price_amount=item.price_amount,
                discount_type_id=item.discount_type_id,
                discount_amount=item.discount_amount,
                promo_discount_amount=item.promo_discount_amount,
            )
            for item in order.items
        ],
    )


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_order(
    request: OrderCreateRequest,
    requester: Requester = Depends(get_requester),
    use_case: CreateOrderUseCase = Depends(CreateOrderUseCase.depends),
) -> OrderResponse:
    with tracer.start_as_current_span('controller.create_order') as span:
        span.set_attribute('run.id', request.run_id)
        span.set_attribute('passengers', len(request.passengers))

        result = await use_case.execute(
            run_id=request.run_id,
            board_station_id=request.board_station_id,
            exit_station_id=request.exit_station_id,
            passengers=[
                PassengerInput(
                    seat_id=p.seat_id,
                    name=p.name,
                    discount_type_id=p.discount_type_id,
                    phone=p.phone,
                )
                for p in request.passengers
            ],
            contact_name=request.contact.name,
            contact_phone=request.contact.phone,
            contact_email=request.contact.email,
            promo_code=request.promo_code,
            requester=requester,
        )
        return _order_response(result.order, payment_url=result.payment_url)


@router.get('/{order_id}/status')
@Logger.io
async def get_order_status(
    order_id: UtilsUUID7,
    requester: Requester = Depends(get_requester),
    use_case: GetOrderStatusUseCase = Depends(GetOrderStatusUseCase.depends),
) -> OrderStatusResponse:
    view = await use_case.execute(order_id=order_id, requester=requester)
    return OrderStatusResponse(
        order_id=view.order.id,
        status=str(view.status),
        amount_due=view.order.amount_due,
        currency=view.order.currency,
        expires_at=view.order.expires_at,
        paid_at=view.order.paid_at,
    )


@router.post('/{order_id}/retry')
@Logger.io
async def retry_payment(
    order_id: UtilsUUID7,
    requester: Requester = Depends(get_requester),
    use_case: RetryPaymentUseCase = Depends(RetryPaymentUseCase.depends),
) -> OrderResponse:
    result = await use_case.execute(order_id=order_id, requester=requester)
    return _order_response(result.order, payment_url=result.payment_url)


@router.post('/{order_id}/cancel')
@Logger.io
async def cancel_order(
    order_id: UtilsUUID7,
    requester: Requester = Depends(get_requester),
    use_case: CancelOrderUseCase = Depends(CancelOrderUseCase.depends),
) -> OrderResponse:
    order = await use_case.execute(order_id=order_id, requester=requester)
    return _order_response(order)
