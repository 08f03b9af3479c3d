from src.service.ordering.domain.enum.order_status import (
    ConfirmOutcome,
    OrderStatus,
    ProviderPaymentStatus,
)

__all__ = ['ConfirmOutcome', 'OrderStatus', 'ProviderPaymentStatus']
