from src.service.promotion.domain.enum.discount_kind import DiscountKind
from src.service.promotion.domain.enum.promo_reason import PROMO_REASON_MESSAGES, PromoReason

__all__ = ['DiscountKind', 'PROMO_REASON_MESSAGES', 'PromoReason']
