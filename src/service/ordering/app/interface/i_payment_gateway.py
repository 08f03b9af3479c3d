from abc import ABC, abstractmethod

from src.service.ordering.domain.entity.order_entity import Order
from src.service.ordering.domain.value_object.payment_session import (
    PaymentSession,
    ProviderPaymentResult,
)


class IPaymentGateway(ABC):
    provider: str

    @abstractmethod
    async def create_session(self, *, order: Order) -> PaymentSession:
        """
        Register the order amount with the provider.

        Raises:
            GatewayError: provider unreachable or refused the registration
        """
        pass

    @abstractmethod
    async def get_status(self, *, provider_order_id: str) -> ProviderPaymentResult:
        pass
