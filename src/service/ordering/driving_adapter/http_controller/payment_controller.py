"""
Payment provider callbacks.

Neither endpoint trusts what the provider (or the browser) sends beyond the correlation
id: the outcome is always re-read from the provider before anything changes.
"""

from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from opentelemetry import trace
import orjson

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.ordering.app.command.confirm_payment_use_case import ConfirmPaymentUseCase


router = APIRouter()
tracer = trace.get_tracer(__name__)

CORRELATION_KEYS = ('orderId', 'mdOrder')


def _pick_correlation_id(*sources: Any) -> Optional[str]:
    for source in sources:
        if not source:
            continue
        for key in CORRELATION_KEYS:
            value = source.get(key)
            if value:
                return str(value)
    return None


async def _read_body(request: Request) -> dict[str, Any]:
    content_type = request.headers.get('content-type', '')
    if 'application/json' in content_type:
        try:
            payload = orjson.loads(await request.body())
        except orjson.JSONDecodeError:
            return {}
        return payload if isinstance(payload, dict) else {}
    if 'form' in content_type:
        return dict(await request.form())
    return {}


@router.post('/webhook')
@Logger.io
async def payment_webhook(
    request: Request,
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> dict[str, str]:
    with tracer.start_as_current_span('controller.payment_webhook') as span:
        provider_order_id = _pick_correlation_id(request.query_params, await _read_body(request))
        if provider_order_id is None:
            raise ValidationError('Missing orderId')
        span.set_attribute('payment.provider_order_id', provider_order_id)

        order = await use_case.sync_from_provider(provider_order_id=provider_order_id)
        return {'order_id': str(order.id), 'status': str(order.status)}


@router.get('/return')
@Logger.io
async def payment_return(
    order_id: Optional[str] = Query(None, alias='orderId'),
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> RedirectResponse:
    """Browser lands here after the hosted payment page; always ends on the finish page."""
    params: dict[str, str] = {}
    if order_id:
        try:
            order = await use_case.sync_from_provider(provider_order_id=order_id)
            params = {'order_id': str(order.id), 'status': str(order.status)}
        except CustomBaseError as e:
            Logger.base.warning(f'💳 [RETURN] Could not confirm {order_id}: {e.message}')
            params = {'status': 'unknown'}
    else:
        params = {'status': 'unknown'}

    return RedirectResponse(url=f'{settings.PAYMENT_FINISH_URL}?{urlencode(params)}')
