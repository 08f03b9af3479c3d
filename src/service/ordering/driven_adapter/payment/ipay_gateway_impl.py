"""
iPay payment gateway (register.do / getOrderStatusExtended.do)

Form-encoded POSTs with HTTP Basic auth. Amounts travel in minor units with the ISO
4217 numeric currency code. The provider's `orderId` is our correlation id
(provider_order_id); the shopper is sent to `formUrl`.
"""

from decimal import Decimal
import time
from typing import Any, Optional

import httpx
from uuid_utils import uuid7

from src.platform.exception.exceptions import GatewayError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ordering.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ordering.domain.entity.order_entity import Order
from src.service.ordering.domain.enum.order_status import ProviderPaymentStatus
from src.service.ordering.domain.value_object.payment_session import (
    PaymentSession,
    ProviderPaymentResult,
)
from src.service.promotion.domain.value_object.money import to_minor_units


IPAY_STATUS_DEPOSITED = 2
IPAY_FAILED_STATUSES = frozenset({3, 6})  # authorization cancelled / declined


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def interpret_status(payload: dict[str, Any]) -> ProviderPaymentStatus:
    action_code = _as_int(payload.get('actionCode'))
    order_status = _as_int(payload.get('orderStatus'))
    if action_code == 0 or order_status == IPAY_STATUS_DEPOSITED:
        return ProviderPaymentStatus.PAID
    if order_status in IPAY_FAILED_STATUSES:
        return ProviderPaymentStatus.FAILED
    return ProviderPaymentStatus.PENDING


class IPayGatewayImpl(IPaymentGateway):
    provider = 'ipay'

    def __init__(
        self,
        *,
        base_url: str,
        user: str,
        password: str,
        return_url: str,
        currency_numeric: int = 946,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.auth = httpx.BasicAuth(user, password)
        self.return_url = return_url
        self.currency_numeric = currency_numeric
        self.timeout = timeout
        self.transport = transport

    async def _post_form(self, operation: str, params: dict[str, Any]) -> dict[str, Any]:
        started = time.perf_counter()
        result = 'error'
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=self.auth,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    f'/{operation}',
                    data={k: str(v) for k, v in params.items() if v is not None},
                )
                response.raise_for_status()
                payload = response.json()
            result = 'ok'
            return payload if isinstance(payload, dict) else {}
        except httpx.HTTPStatusError as e:
            Logger.base.error(
                f'💳 [IPAY] {operation} HTTP {e.response.status_code}: {e.response.text[:200]}'
            )
            raise GatewayError(f'Payment provider returned HTTP {e.response.status_code}')
        except (httpx.HTTPError, ValueError) as e:
            Logger.base.error(f'💳 [IPAY] {operation} failed: {type(e).__name__}: {e}')
            raise GatewayError('Payment provider unavailable')
        finally:
            metrics.record_gateway_call(
                operation=operation, result=result, duration=time.perf_counter() - started
            )

    @Logger.io
    async def create_session(self, *, order: Order) -> PaymentSession:
        payload = await self._post_form(
            'register.do',
            {
                'orderNumber': uuid7().hex,
                'amount': to_minor_units(order.amount_due),
                'currency': self.currency_numeric,
                'returnUrl': self.return_url,
                'description': f'Order {order.id}',
            },
        )

        error_code = _as_int(payload.get('errorCode')) or 0
        provider_order_id = payload.get('orderId')
        form_url = payload.get('formUrl')
        if error_code != 0 or not provider_order_id or not form_url:
            Logger.base.error(
                f'💳 [IPAY] register.do refused order {order.id}: '
                f'errorCode={error_code} {payload.get("errorMessage", "")}'
            )
            raise GatewayError('Payment provider refused the payment session')

        return PaymentSession(
            provider=self.provider,
            provider_order_id=str(provider_order_id),
            payment_url=str(form_url),
        )

    @Logger.io
    async def get_status(self, *, provider_order_id: str) -> ProviderPaymentResult:
        payload = await self._post_form(
            'getOrderStatusExtended.do', {'orderId': provider_order_id}
        )
        minor = _as_int(payload.get('amount'))
        return ProviderPaymentResult(
            provider_order_id=provider_order_id,
            status=interpret_status(payload),
            amount=Decimal(minor) / 100 if minor is not None else None,
            raw_status=_as_int(payload.get('orderStatus')),
        )
