from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ordering.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.ordering.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ordering.domain.entity.order_entity import Order
from src.service.ordering.domain.enum.order_status import (
    ConfirmOutcome,
    OrderStatus,
    ProviderPaymentStatus,
)
from src.service.ordering.domain.value_object.payment_session import ProviderPaymentResult
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType


class ConfirmPaymentUseCase:
    """
    Apply a provider payment outcome to the order it belongs to.

    Webhook and browser return both land here. The callback payload is never trusted:
    the status is always re-read from the provider by correlation id. Safe to call any
    number of times for the same payment.
    """

    def __init__(
        self,
        *,
        order_command_repo: IOrderCommandRepo,
        payment_gateway: IPaymentGateway,
        run_event_broadcaster: IRunEventBroadcaster,
    ) -> None:
        self.order_command_repo = order_command_repo
        self.payment_gateway = payment_gateway
        self.run_event_broadcaster = run_event_broadcaster
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        order_command_repo: IOrderCommandRepo = Depends(Provide[Container.order_command_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        run_event_broadcaster: IRunEventBroadcaster = Depends(
            Provide[Container.run_event_broadcaster]
        ),
    ) -> Self:
        return cls(
            order_command_repo=order_command_repo,
            payment_gateway=payment_gateway,
            run_event_broadcaster=run_event_broadcaster,
        )

    @Logger.io
    async def sync_from_provider(self, *, provider_order_id: str) -> Order:
        with self.tracer.start_as_current_span(
            'use_case.confirm_payment', attributes={'payment.provider_order_id': provider_order_id}
        ):
            order = await self.order_command_repo.get_by_provider_order_id(
                provider_order_id=provider_order_id
            )
            if order is None:
                Logger.base.warning(f'💳 [CONFIRM] Unknown provider order {provider_order_id}')
                raise NotFoundError('Order not found')

            result = await self.payment_gateway.get_status(provider_order_id=provider_order_id)
            return await self.confirm(order=order, result=result)

    @Logger.io
    async def confirm(self, *, order: Order, result: ProviderPaymentResult) -> Order:
        if result.status == ProviderPaymentStatus.PENDING:
            Logger.base.info(f'⏳ [CONFIRM] {order.id} still pending at provider')
            return order

        if result.status == ProviderPaymentStatus.FAILED:
            await self.order_command_repo.mark_session_failed(
                provider_order_id=result.provider_order_id
            )
            if result.provider_order_id != order.provider_order_id:
                # A retry replaced this session; the current one may still be paid
                Logger.base.info(
                    f'⏭️ [CONFIRM] Superseded session {result.provider_order_id} failed, '
                    f'order {order.id} stays {order.status}'
                )
                return order

            closed = await self.order_command_repo.close(
                order_id=order.id, status=OrderStatus.FAILED
            )
            if closed is None:
                # Already terminal; nothing to release
                return order
            metrics.record_order_transition(status=str(OrderStatus.FAILED))
            await self.run_event_broadcaster.publish(
                run_id=order.run_id, event=RunEventType.INTENTS_UPDATE
            )
            return closed

        confirmed = await self.order_command_repo.confirm_paid(
            order_id=order.id,
            provider=self.payment_gateway.provider,
            provider_order_id=result.provider_order_id,
            amount=result.amount if result.amount is not None else order.amount_due,
        )

        if confirmed.outcome in (ConfirmOutcome.NOT_PENDING, ConfirmOutcome.DUPLICATE):
            Logger.base.error(
                f'💸 [CONFIRM] Payment {result.provider_order_id} succeeded for '
                f'{confirmed.order.status} order {order.id} ({confirmed.outcome}): '
                f'refund required'
            )
        elif confirmed.outcome == ConfirmOutcome.PAID_NOW:
            metrics.record_order_transition(status=str(OrderStatus.PAID))
            await self.run_event_broadcaster.publish(
                run_id=order.run_id, event=RunEventType.INTENTS_UPDATE
            )
        return confirmed.order
