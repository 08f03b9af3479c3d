"""
iPay gateway against an httpx.MockTransport: request shape, response mapping and
failure translation to GatewayError.
"""

from decimal import Decimal
from urllib.parse import parse_qs

import httpx
import pytest

from src.platform.exception.exceptions import GatewayError
from src.service.ordering.domain.enum.order_status import ProviderPaymentStatus
from src.service.ordering.driven_adapter.payment.ipay_gateway_impl import (
    IPayGatewayImpl,
    interpret_status,
)


def _gateway(handler) -> IPayGatewayImpl:
    return IPayGatewayImpl(
        base_url='https://ipay.test/payment/rest/',
        user='merchant',
        password='secret',
        return_url='https://shop.test/api/payment/return',
        transport=httpx.MockTransport(handler),
    )


class TestInterpretStatus:
    @pytest.mark.parametrize(
        'payload, expected',
        [
            ({'orderStatus': 2}, ProviderPaymentStatus.PAID),
            ({'actionCode': 0, 'orderStatus': 1}, ProviderPaymentStatus.PAID),
            ({'orderStatus': '2'}, ProviderPaymentStatus.PAID),
            ({'orderStatus': 6, 'actionCode': -2007}, ProviderPaymentStatus.FAILED),
            ({'orderStatus': 3}, ProviderPaymentStatus.FAILED),
            ({'orderStatus': 0, 'actionCode': -100}, ProviderPaymentStatus.PENDING),
            ({}, ProviderPaymentStatus.PENDING),
        ],
    )
    def test_status_mapping(self, payload, expected):
        assert interpret_status(payload) == expected


class TestCreateSession:
    async def test_registers_amount_in_minor_units(self, pending_order):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured['url'] = str(request.url)
            captured['form'] = parse_qs(request.content.decode())
            captured['auth'] = request.headers.get('authorization')
            return httpx.Response(
                200, json={'orderId': 'prov-9', 'formUrl': 'https://ipay.test/form?id=prov-9'}
            )

        session = await _gateway(handler).create_session(order=pending_order)

        assert captured['url'] == 'https://ipay.test/payment/rest/register.do'
        assert captured['form']['amount'] == ['16000']
        assert captured['form']['currency'] == ['946']
        assert captured['form']['returnUrl'] == ['https://shop.test/api/payment/return']
        assert len(captured['form']['orderNumber'][0]) == 32
        assert captured['auth'].startswith('Basic ')
        assert session.provider == 'ipay'
        assert session.provider_order_id == 'prov-9'
        assert session.payment_url == 'https://ipay.test/form?id=prov-9'

    async def test_provider_refusal(self, pending_order):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={'errorCode': '5', 'errorMessage': 'Access denied'})

        with pytest.raises(GatewayError, match='refused'):
            await _gateway(handler).create_session(order=pending_order)

    async def test_http_error(self, pending_order):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text='maintenance')

        with pytest.raises(GatewayError) as exc_info:
            await _gateway(handler).create_session(order=pending_order)
        assert exc_info.value.status_code == 502

    async def test_unreachable(self, pending_order):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('connection refused', request=request)

        with pytest.raises(GatewayError, match='unavailable'):
            await _gateway(handler).create_session(order=pending_order)


class TestGetStatus:
    async def test_reads_status_and_amount(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith('/getOrderStatusExtended.do')
            assert parse_qs(request.content.decode())['orderId'] == ['prov-1']
            return httpx.Response(200, json={'orderStatus': 2, 'actionCode': 0, 'amount': 16000})

        result = await _gateway(handler).get_status(provider_order_id='prov-1')

        assert result.status == ProviderPaymentStatus.PAID
        assert result.amount == Decimal('160')
        assert result.raw_status == 2

    async def test_non_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text='<html>oops</html>')

        with pytest.raises(GatewayError):
            await _gateway(handler).get_status(provider_order_id='prov-1')
