from datetime import datetime, timedelta, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError, GatewayError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ordering.app.command.create_order_use_case import CheckoutResult
from src.service.ordering.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.ordering.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ordering.domain.enum.order_status import OrderStatus
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType
from src.service.shared_kernel.domain.value_object.requester import Requester


class RetryPaymentUseCase:
    """Open a new payment session for a pending order whose holds are all still live."""

    def __init__(
        self,
        *,
        order_command_repo: IOrderCommandRepo,
        payment_gateway: IPaymentGateway,
        run_event_broadcaster: IRunEventBroadcaster,
        ttl_seconds: int = settings.ORDER_TTL_SECONDS,
    ) -> None:
        self.order_command_repo = order_command_repo
        self.payment_gateway = payment_gateway
        self.run_event_broadcaster = run_event_broadcaster
        self.ttl_seconds = ttl_seconds
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
    async def execute(self, *, order_id: UUID, requester: Requester) -> CheckoutResult:
        with self.tracer.start_as_current_span(
            'use_case.retry_payment', attributes={'order.id': str(order_id)}
        ):
            order = await self.order_command_repo.get_by_id(order_id=order_id)
            if order is None:
                raise NotFoundError('Order not found')
            order.ensure_owned_by(requester.owner_key)
            order.ensure_pending()

            now = datetime.now(timezone.utc)
            if order.is_overdue(now):
                if await self.order_command_repo.close(
                    order_id=order.id, status=OrderStatus.EXPIRED
                ):
                    metrics.record_order_transition(status=str(OrderStatus.EXPIRED))
                    await self.run_event_broadcaster.publish(
                        run_id=order.run_id, event=RunEventType.INTENTS_UPDATE
                    )
                raise ConflictError(
                    'Order expired, please select the seats again', code='INTENTS_EXPIRED'
                )

            order = await self.order_command_repo.extend_holds(
                order_id=order.id, expires_at=now + timedelta(seconds=self.ttl_seconds)
            )

            try:
                session = await self.payment_gateway.create_session(order=order)
            except GatewayError as e:
                raise GatewayError(e.message, order_id=str(order.id))

            await self.order_command_repo.save_payment_session(order_id=order.id, session=session)
            Logger.base.info(f'🔁 [RETRY] {order.id} -> {session.provider_order_id}')
            return CheckoutResult(
                order=order.with_payment_session(session), payment_url=session.payment_url
            )
