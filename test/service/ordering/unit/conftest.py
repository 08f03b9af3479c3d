from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import attrs
import pytest
from uuid_utils import uuid7

from src.service.ordering.domain.entity.order_entity import Order, OrderItem
from src.service.ordering.domain.enum.order_status import OrderStatus
from src.service.ordering.domain.value_object.contact import Contact
from src.service.ordering.domain.value_object.payment_session import PaymentSession
from src.service.shared_kernel.domain.value_object.segment import Segment


@pytest.fixture
def pending_order(requester) -> Order:
    now = datetime.now(timezone.utc)
    return Order(
        id=uuid7(),
        owner_key=requester.owner_key,
        run_id=7,
        board_station_id=11,
        exit_station_id=13,
        segment=Segment(board_pos=0, exit_pos=2),
        contact=Contact(name='Ana', phone='+40722000111', email='ana@example.com'),
        subtotal=Decimal('160.00'),
        discount_total=Decimal('0.00'),
        amount_due=Decimal('160.00'),
        currency='RON',
        expires_at=now + timedelta(minutes=10),
        items=[
            OrderItem(seat_id=101, passenger_name='Ana', price_amount=Decimal('80.00')),
            OrderItem(seat_id=102, passenger_name='Ion', price_amount=Decimal('80.00')),
        ],
        provider='ipay',
        provider_order_id='prov-1',
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def paid_order(pending_order) -> Order:
    return attrs.evolve(
        pending_order, status=OrderStatus.PAID, paid_at=datetime.now(timezone.utc)
    )


@pytest.fixture
def payment_session() -> PaymentSession:
    return PaymentSession(
        provider='ipay', provider_order_id='prov-2', payment_url='https://pay.example/form/2'
    )


@pytest.fixture
def order_repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def gateway(payment_session) -> AsyncMock:
    gateway = AsyncMock()
    gateway.provider = 'ipay'
    gateway.create_session = AsyncMock(return_value=payment_session)
    return gateway
