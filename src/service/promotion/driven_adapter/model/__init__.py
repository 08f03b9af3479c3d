from src.service.promotion.driven_adapter.model.fare_model import (
    DiscountTypeModel,
    PriceListItemModel,
    PriceListModel,
    ScheduleDiscountModel,
)
from src.service.promotion.driven_adapter.model.promo_code_model import (
    PromoCodeHourModel,
    PromoCodeModel,
    PromoCodeRouteModel,
    PromoCodeScheduleModel,
    PromoCodeUsageModel,
    PromoCodeWeekdayModel,
)

__all__ = [
    'DiscountTypeModel',
    'PriceListItemModel',
    'PriceListModel',
    'PromoCodeHourModel',
    'PromoCodeModel',
    'PromoCodeRouteModel',
    'PromoCodeScheduleModel',
    'PromoCodeUsageModel',
    'PromoCodeWeekdayModel',
    'ScheduleDiscountModel',
]
