from decimal import Decimal
from typing import Optional

import attrs

from src.service.ordering.domain.enum.order_status import ProviderPaymentStatus


@attrs.frozen
class PaymentSession:
    provider: str
    provider_order_id: str
    payment_url: str


@attrs.frozen
class ProviderPaymentResult:
    provider_order_id: str
    status: ProviderPaymentStatus
    amount: Optional[Decimal] = None
    raw_status: Optional[int] = None
