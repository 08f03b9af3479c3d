from decimal import Decimal
from typing import Any

import pytest

from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent
from src.service.inventory.driven_adapter.repo.intent_command_repo_impl import (
    IntentCommandRepoImpl,
)
from src.service.ordering.domain.entity.order_entity import Order, OrderItem
from src.service.ordering.domain.value_object.contact import Contact
from src.service.ordering.driven_adapter.repo.order_command_repo_impl import (
    OrderCommandRepoImpl,
)
from src.service.shared_kernel.domain.value_object.segment import Segment


OWNER = 'anon:019a3fa5-0000-7000-8000-000000000001'
SEGMENT = Segment(board_pos=0, exit_pos=2)


@pytest.fixture
def intent_repo() -> IntentCommandRepoImpl:
    return IntentCommandRepoImpl()


@pytest.fixture
def order_repo(intent_repo: IntentCommandRepoImpl) -> OrderCommandRepoImpl:
    return OrderCommandRepoImpl(intent_command_repo=intent_repo)


@pytest.fixture
def new_order(seeded_run: dict[str, Any]):
    def _new_order(seat_ids: list[int]) -> Order:
        return Order.create(
            owner_key=OWNER,
            run_id=seeded_run['run_id'],
            board_station_id=seeded_run['station_ids'][0],
            exit_station_id=seeded_run['station_ids'][2],
            segment=SEGMENT,
            contact=Contact(name='Ana', phone='+40722000111', email='ana@example.com'),
            items=[
                OrderItem(seat_id=seat_id, passenger_name='Ana', price_amount=Decimal('80.00'))
                for seat_id in seat_ids
            ],
            subtotal=Decimal('80.00') * len(seat_ids),
            discount_total=Decimal('0.00'),
            amount_due=Decimal('80.00') * len(seat_ids),
            currency='RON',
            ttl_seconds=600,
        )

    return _new_order


@pytest.fixture
def checkout(order_repo, intent_repo, new_order, seeded_run):
    """Hold the first `seat_count` seats over the whole route and check them out"""

    async def _checkout(seat_count: int = 2) -> Order:
        seat_ids = seeded_run['seat_ids'][:seat_count]
        for seat_id in seat_ids:
            await intent_repo.create(
                intent=SeatIntent.create(
                    run_id=seeded_run['run_id'],
                    seat_id=seat_id,
                    owner_key=OWNER,
                    board_station_id=seeded_run['station_ids'][0],
                    exit_station_id=seeded_run['station_ids'][2],
                    segment=SEGMENT,
                    ttl_seconds=60,
                ),
                ttl_seconds=60,
            )
        return await order_repo.create_with_holds(order=new_order(seat_ids))

    return _checkout
