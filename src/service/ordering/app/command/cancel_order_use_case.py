from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ordering.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.ordering.domain.entity.order_entity import Order
from src.service.ordering.domain.enum.order_status import OrderStatus
from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType
from src.service.shared_kernel.domain.value_object.requester import Requester


class CancelOrderUseCase:
    def __init__(
        self,
        *,
        order_command_repo: IOrderCommandRepo,
        run_event_broadcaster: IRunEventBroadcaster,
    ) -> None:
        self.order_command_repo = order_command_repo
        self.run_event_broadcaster = run_event_broadcaster

    @classmethod
    @inject
    def depends(
        cls,
        order_command_repo: IOrderCommandRepo = Depends(Provide[Container.order_command_repo]),
        run_event_broadcaster: IRunEventBroadcaster = Depends(
            Provide[Container.run_event_broadcaster]
        ),
    ) -> Self:
        return cls(
            order_command_repo=order_command_repo,
            run_event_broadcaster=run_event_broadcaster,
        )

    @Logger.io
    async def execute(self, *, order_id: UUID, requester: Requester) -> Order:
        order = await self.order_command_repo.get_by_id(order_id=order_id)
        if order is None:
            raise NotFoundError('Order not found')
        order.ensure_owned_by(requester.owner_key)
        order.ensure_pending()

        cancelled = await self.order_command_repo.close(
            order_id=order.id, status=OrderStatus.CANCELLED
        )
        if cancelled is None:
            # Lost the race against payment or the reaper
            current = await self.order_command_repo.get_by_id(order_id=order_id)
            (current or order).ensure_pending()
            return current or order

        metrics.record_order_transition(status=str(OrderStatus.CANCELLED))
        await self.run_event_broadcaster.publish(
            run_id=order.run_id, event=RunEventType.INTENTS_UPDATE
        )
        return cancelled
