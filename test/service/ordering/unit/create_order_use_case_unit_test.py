"""
Unit tests for CreateOrderUseCase (checkout)

Focus:
1. Pricing flows into the persisted order (discount types, promo per seat)
2. Inapplicable promo stops checkout before anything is written
3. Zero amount due confirms at once; provider failure keeps the order pending
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.exception.exceptions import ConflictError, GatewayError, ScopeError
from src.service.ordering.app.command.create_order_use_case import (
    CreateOrderUseCase,
    PassengerInput,
)
from src.service.ordering.app.interface.i_order_command_repo import ConfirmResult
from src.service.ordering.domain.enum.order_status import ConfirmOutcome, OrderStatus
from src.service.promotion.domain.entity.discount_type_entity import DiscountType
from src.service.promotion.domain.entity.promo_code_entity import PromoCode
from src.service.promotion.domain.enum.discount_kind import DiscountKind
from src.service.shared_kernel.domain.enum.run_event_type import RunEventType


STUDENT = DiscountType(
    id=2, code='STUD', label='Student', kind=DiscountKind.PERCENT, value_off=Decimal('50')
)


class TestCreateOrder:
    @pytest.fixture
    def query_repo(self, run_info):
        repo = AsyncMock()
        repo.get_run = AsyncMock(return_value=run_info)
        return repo

    @pytest.fixture
    def fare_repo(self):
        repo = AsyncMock()
        repo.get_segment_price = AsyncMock(return_value=Decimal('80.00'))
        repo.get_online_discount_types = AsyncMock(return_value={2: STUDENT})
        repo.get_promo_code = AsyncMock(return_value=None)
        return repo

    @pytest.fixture
    def order_repo(self, order_repo):
        async def _create_with_holds(*, order):
            return order

        order_repo.create_with_holds = AsyncMock(side_effect=_create_with_holds)
        return order_repo

    @pytest.fixture
    def use_case(self, query_repo, fare_repo, order_repo, gateway, broadcaster):
        return CreateOrderUseCase(
            seat_inventory_query_repo=query_repo,
            fare_query_repo=fare_repo,
            order_command_repo=order_repo,
            payment_gateway=gateway,
            run_event_broadcaster=broadcaster,
            ttl_seconds=600,
        )

    async def _checkout(self, use_case, requester, **overrides):
        kwargs = dict(
            run_id=7,
            board_station_id=11,
            exit_station_id=13,
            passengers=[
                PassengerInput(seat_id=101, name='Ana'),
                PassengerInput(seat_id=102, name='Ion', discount_type_id=2),
            ],
            contact_name='Ana Popescu',
            contact_phone='+40722000111',
            contact_email='ana@example.com',
            requester=requester,
        )
        kwargs.update(overrides)
        return await use_case.execute(**kwargs)

    async def test_creates_pending_order_and_payment_session(
        self, use_case, order_repo, gateway, payment_session, requester
    ):
        result = await self._checkout(use_case, requester)

        order = order_repo.create_with_holds.call_args.kwargs['order']
        assert order.owner_key == requester.owner_key
        assert order.seat_ids == [101, 102]
        assert [item.discount_amount for item in order.items] == [
            Decimal('0.00'),
            Decimal('40.00'),
        ]
        assert order.subtotal == Decimal('160.00')
        assert order.amount_due == Decimal('120.00')
        assert order.currency == 'RON'

        gateway.create_session.assert_awaited_once()
        order_repo.save_payment_session.assert_awaited_once_with(
            order_id=order.id, session=payment_session
        )
        assert result.payment_url == payment_session.payment_url
        assert result.order.provider_order_id == payment_session.provider_order_id
        assert result.order.status == OrderStatus.PENDING

    async def test_promo_spread_over_items(self, use_case, fare_repo, order_repo, requester):
        fare_repo.get_promo_code.return_value = PromoCode(
            id=5,
            code='FIX50',
            kind=DiscountKind.FIXED,
            value_off=Decimal('50'),
            channels=frozenset({'online'}),
        )

        await self._checkout(use_case, requester, promo_code=' fix50 ')

        fare_repo.get_promo_code.assert_awaited_once_with(code='FIX50', phone='+40722000111')
        order = order_repo.create_with_holds.call_args.kwargs['order']
        assert order.promo_code_id == 5
        assert order.promo_code == 'FIX50'
        assert [item.promo_discount_amount for item in order.items] == [
            Decimal('50.00'),
            Decimal('0.00'),
        ]
        assert order.amount_due == Decimal('70.00')

    async def test_inapplicable_promo_rejects_before_writing(
        self, use_case, fare_repo, order_repo, requester
    ):
        fare_repo.get_promo_code.return_value = PromoCode(
            id=5,
            code='ROUTE9',
            kind=DiscountKind.PERCENT,
            value_off=Decimal('10'),
            channels=frozenset({'online'}),
            route_ids=frozenset({9}),
        )

        with pytest.raises(ScopeError) as exc_info:
            await self._checkout(use_case, requester, promo_code='ROUTE9')

        assert exc_info.value.reason == 'route'
        order_repo.create_with_holds.assert_not_awaited()

    async def test_boarding_started(self, use_case, query_repo, run_info, order_repo, requester):
        query_repo.get_run.return_value = attrs.evolve(run_info, boarding_started=True)

        with pytest.raises(ConflictError) as exc_info:
            await self._checkout(use_case, requester)

        assert exc_info.value.code == 'BOARDING_STARTED'
        order_repo.create_with_holds.assert_not_awaited()

    async def test_expired_holds_propagate(self, use_case, order_repo, gateway, requester):
        order_repo.create_with_holds.side_effect = ConflictError(
            'Seat holds expired', code='INTENTS_EXPIRED', seat_ids=[102]
        )

        with pytest.raises(ConflictError) as exc_info:
            await self._checkout(use_case, requester)

        assert exc_info.value.code == 'INTENTS_EXPIRED'
        gateway.create_session.assert_not_awaited()

    async def test_zero_amount_confirms_immediately(
        self, use_case, fare_repo, order_repo, gateway, broadcaster, requester
    ):
        fare_repo.get_promo_code.return_value = PromoCode(
            id=5,
            code='FREE',
            kind=DiscountKind.PERCENT,
            value_off=Decimal('100'),
            channels=frozenset({'online'}),
        )

        async def _confirm_paid(*, order_id, provider, provider_order_id, amount):
            order = order_repo.create_with_holds.call_args.kwargs['order']
            return ConfirmResult(
                order=attrs.evolve(order, status=OrderStatus.PAID),
                outcome=ConfirmOutcome.PAID_NOW,
                reservation_count=2,
            )

        order_repo.confirm_paid = AsyncMock(side_effect=_confirm_paid)

        result = await self._checkout(use_case, requester, promo_code='FREE')

        assert result.order.status == OrderStatus.PAID
        assert result.payment_url is None
        assert order_repo.confirm_paid.call_args.kwargs['provider'] == 'free'
        assert order_repo.confirm_paid.call_args.kwargs['amount'] == Decimal('0.00')
        gateway.create_session.assert_not_awaited()
        broadcaster.publish.assert_awaited_once_with(run_id=7, event=RunEventType.INTENTS_UPDATE)

    async def test_gateway_failure_keeps_order_pending(
        self, use_case, order_repo, gateway, requester
    ):
        gateway.create_session.side_effect = GatewayError('Payment provider unavailable')

        with pytest.raises(GatewayError) as exc_info:
            await self._checkout(use_case, requester)

        order = order_repo.create_with_holds.call_args.kwargs['order']
        assert exc_info.value.extra == {'order_id': str(order.id)}
        order_repo.close.assert_not_awaited()
        order_repo.save_payment_session.assert_not_awaited()
