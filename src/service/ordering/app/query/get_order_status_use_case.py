from datetime import datetime, timezone
from typing import Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ordering.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.ordering.domain.entity.order_entity import Order
from src.service.ordering.domain.enum.order_status import OrderStatus
from src.service.shared_kernel.domain.value_object.requester import Requester


@attrs.frozen
class OrderStatusView:
    order: Order
    status: OrderStatus


class GetOrderStatusUseCase:
    """
    Status polling for the checkout finish page.

    A pending order past its deadline reads as expired before the reaper gets to it.
    """

    def __init__(self, *, order_command_repo: IOrderCommandRepo) -> None:
        self.order_command_repo = order_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        order_command_repo: IOrderCommandRepo = Depends(Provide[Container.order_command_repo]),
    ) -> Self:
        return cls(order_command_repo=order_command_repo)

    @Logger.io
    async def execute(self, *, order_id: UUID, requester: Requester) -> OrderStatusView:
        order = await self.order_command_repo.get_by_id(order_id=order_id)
        if order is None:
            raise NotFoundError('Order not found')
        order.ensure_owned_by(requester.owner_key)
        return OrderStatusView(
            order=order, status=order.effective_status(datetime.now(timezone.utc))
        )
