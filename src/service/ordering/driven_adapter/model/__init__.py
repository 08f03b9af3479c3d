from src.service.ordering.driven_adapter.model.order_model import (
    OrderItemModel,
    OrderModel,
    PaymentModel,
)

__all__ = ['OrderItemModel', 'OrderModel', 'PaymentModel']
