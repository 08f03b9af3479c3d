from decimal import ROUND_HALF_UP, Decimal

from src.service.promotion.domain.enum.discount_kind import DiscountKind


CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """2 decimal currency amount in minor units (bani / cents)"""
    return int(round2(amount) * 100)


def discount_off(*, kind: DiscountKind, value_off: Decimal, base: Decimal) -> Decimal:
    """Amount taken off `base`; never negative, never more than base"""
    if base <= 0:
        return ZERO
    if kind == DiscountKind.PERCENT:
        off = round2(base * value_off / 100)
    else:
        off = round2(value_off)
    return max(ZERO, min(off, base))
