from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_seat_inventory_query_repo import (
    ISeatInventoryQueryRepo,
)
from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent
from src.service.shared_kernel.domain.value_object.requester import Requester


class ListMyIntentsUseCase:
    def __init__(self, *, seat_inventory_query_repo: ISeatInventoryQueryRepo) -> None:
        self.seat_inventory_query_repo = seat_inventory_query_repo

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
    async def execute(self, *, run_id: int, requester: Requester) -> list[SeatIntent]:
        return await self.seat_inventory_query_repo.list_owned_intents(
            run_id=run_id, owner_key=requester.owner_key
        )
