from enum import StrEnum


class PromoReason(StrEnum):
    """Why a promo code was refused; first failing rule wins"""

    MISSING = 'missing'
    NOT_FOUND = 'not_found'
    CHANNEL = 'channel'
    ROUTE = 'route'
    SCHEDULE = 'schedule'
    HOUR = 'hour'
    WEEKDAY = 'weekday'
    TOTAL_USES = 'total_uses'
    PER_PERSON_USES = 'per_person_uses'
    MIN_PRICE = 'min_price'
    NO_DISCOUNT = 'no_discount'


PROMO_REASON_MESSAGES: dict[PromoReason, str] = {
    PromoReason.MISSING: 'Code missing',
    PromoReason.NOT_FOUND: 'Code not found or expired',
    PromoReason.CHANNEL: 'Code not valid on this channel',
    PromoReason.ROUTE: 'Route not in scope',
    PromoReason.SCHEDULE: 'Departure not in scope',
    PromoReason.HOUR: 'Not valid at this hour',
    PromoReason.WEEKDAY: 'Not valid on this weekday',
    PromoReason.TOTAL_USES: 'Usage limit reached',
    PromoReason.PER_PERSON_USES: 'Already used for this phone number',
    PromoReason.MIN_PRICE: 'Minimum amount not reached',
    PromoReason.NO_DISCOUNT: 'Discount unavailable',
}
