from enum import StrEnum


class OrderStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    EXPIRED = 'expired'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self != OrderStatus.PENDING


class ProviderPaymentStatus(StrEnum):
    """Outcome reported by the payment provider for one payment session"""

    PAID = 'paid'
    FAILED = 'failed'
    PENDING = 'pending'


class ConfirmOutcome(StrEnum):
    PAID_NOW = 'paid_now'
    ALREADY_PAID = 'already_paid'
    NOT_PENDING = 'not_pending'  # late success on an expired/cancelled/failed order
    DUPLICATE = 'duplicate'  # a second session paid an order that is already paid


class PaymentRecordStatus(StrEnum):
    """State of one payment session row; one row per provider_order_id"""

    PENDING = 'pending'
    PAID = 'paid'
    FAILED = 'failed'
    REFUND_REQUIRED = 'refund_required'
