from src.service.ordering.app.interface.i_expiry_reaper_repo import IExpiryReaperRepo, ReapResult
from src.service.ordering.app.interface.i_order_command_repo import (
    ConfirmResult,
    IOrderCommandRepo,
)
from src.service.ordering.app.interface.i_payment_gateway import IPaymentGateway

__all__ = [
    'ConfirmResult',
    'IExpiryReaperRepo',
    'IOrderCommandRepo',
    'IPaymentGateway',
    'ReapResult',
]
