"""
Promo code evaluation.

An ordered rule pipeline over a point-in-time read of the code (PromoCode) and the
booking context. The first failing rule decides the reason. Pure: same inputs, same
result, no storage access and no clock reads beyond `context.now`.
"""

from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

import attrs

from src.platform.exception.exceptions import ScopeError
from src.service.promotion.domain.entity.promo_code_entity import PromoCode
from src.service.promotion.domain.enum.promo_reason import PROMO_REASON_MESSAGES, PromoReason
from src.service.promotion.domain.value_object.money import ZERO, discount_off, round2


DEFAULT_CHANNEL = 'online'


def normalize_code(code: Optional[str]) -> str:
    return (code or '').strip().upper()


def normalize_channel(channel: Optional[str]) -> str:
    return (channel or '').strip().lower() or DEFAULT_CHANNEL


def sunday_based_weekday(day: date) -> int:
    """0 = Sunday ... 6 = Saturday"""
    return day.isoweekday() % 7


@attrs.frozen
class PromoContext:
    code: str
    now: datetime
    channel: str = DEFAULT_CHANNEL
    route_id: Optional[int] = None
    route_schedule_id: Optional[int] = None
    departure_time: Optional[time] = None
    travel_date: Optional[date] = None
    phone: Optional[str] = None


@attrs.frozen
class PromoResult:
    valid: bool
    code: str
    reason: Optional[PromoReason] = None
    discount_amount: Decimal = ZERO
    promo_code_id: Optional[int] = None
    combinable: bool = False

    @property
    def message(self) -> Optional[str]:
        return PROMO_REASON_MESSAGES[self.reason] if self.reason else None

    def raise_if_invalid(self) -> None:
        if not self.valid:
            assert self.reason is not None
            raise ScopeError(self.message or 'Promo code not applicable', reason=str(self.reason))


_Rule = Callable[[PromoCode, PromoContext, Decimal], bool]


def _channel_allowed(promo: PromoCode, ctx: PromoContext, base: Decimal) -> bool:
    return normalize_channel(ctx.channel) in promo.channels


def _route_in_scope(promo: PromoCode, ctx: PromoContext, base: Decimal) -> bool:
    return not promo.route_ids or ctx.route_id in promo.route_ids


def _schedule_in_scope(promo: PromoCode, ctx: PromoContext, base: Decimal) -> bool:
    return not promo.schedule_ids or ctx.route_schedule_id in promo.schedule_ids


def _hour_in_scope(promo: PromoCode, ctx: PromoContext, base: Decimal) -> bool:
    if not promo.hour_windows or ctx.departure_time is None:
        return True
    return any(window.contains(ctx.departure_time) for window in promo.hour_windows)


def _weekday_in_scope(promo: PromoCode, ctx: PromoContext, base: Decimal) -> bool:
    if not promo.weekdays or ctx.travel_date is None:
        return True
    return sunday_based_weekday(ctx.travel_date) in promo.weekdays


def _total_uses_left(promo: PromoCode, ctx: PromoContext, base: Decimal) -> bool:
    return not promo.max_total_uses or promo.total_uses < promo.max_total_uses


def _phone_uses_left(promo: PromoCode, ctx: PromoContext, base: Decimal) -> bool:
    if not ctx.phone or not promo.max_uses_per_person:
        return True
    return promo.phone_uses < promo.max_uses_per_person


def _min_price_reached(promo: PromoCode, ctx: PromoContext, base: Decimal) -> bool:
    return not promo.min_price or base >= promo.min_price


RULES: tuple[tuple[PromoReason, _Rule], ...] = (
    (PromoReason.CHANNEL, _channel_allowed),
    (PromoReason.ROUTE, _route_in_scope),
    (PromoReason.SCHEDULE, _schedule_in_scope),
    (PromoReason.HOUR, _hour_in_scope),
    (PromoReason.WEEKDAY, _weekday_in_scope),
    (PromoReason.TOTAL_USES, _total_uses_left),
    (PromoReason.PER_PERSON_USES, _phone_uses_left),
    (PromoReason.MIN_PRICE, _min_price_reached),
)


def compute_promo_discount(promo: PromoCode, base: Decimal) -> Decimal:
    discount = discount_off(kind=promo.kind, value_off=promo.value_off, base=base)
    if promo.max_discount:
        discount = min(discount, promo.max_discount)
    return round2(min(discount, base))


def evaluate_promo(
    promo: Optional[PromoCode], context: PromoContext, *, base_amount: Decimal
) -> PromoResult:
    code = normalize_code(context.code)
    if not code:
        return PromoResult(valid=False, code=code, reason=PromoReason.MISSING)
    if promo is None or not promo.is_available_at(context.now):
        return PromoResult(valid=False, code=code, reason=PromoReason.NOT_FOUND)

    for reason, rule in RULES:
        if not rule(promo, context, base_amount):
            return PromoResult(valid=False, code=code, reason=reason, promo_code_id=promo.id)

    discount = compute_promo_discount(promo, base_amount)
    if discount <= 0:
        return PromoResult(
            valid=False, code=code, reason=PromoReason.NO_DISCOUNT, promo_code_id=promo.id
        )

    return PromoResult(
        valid=True,
        code=code,
        discount_amount=discount,
        promo_code_id=promo.id,
        combinable=promo.combinable,
    )
