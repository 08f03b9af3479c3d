"""
Order pricing: segment fare, per-passenger discount types, then the promo code.

Discount types are computed per seat against the undiscounted fare and capped at it.
The promo code is evaluated against what remains after discount types, and its amount
is spread over seats in order, each seat absorbing at most its remaining price.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Optional

import attrs

from src.service.promotion.domain.entity.discount_type_entity import DiscountType
from src.service.promotion.domain.entity.promo_code_entity import PromoCode
from src.service.promotion.domain.promo_rules import PromoContext, PromoResult, evaluate_promo
from src.service.promotion.domain.value_object.money import ZERO, round2


@attrs.frozen
class PassengerFare:
    seat_id: int
    discount_type: Optional[DiscountType] = None


@attrs.frozen
class QuotedSeat:
    seat_id: int
    price_amount: Decimal
    discount_type_id: Optional[int] = None
    discount_amount: Decimal = ZERO
    promo_discount_amount: Decimal = ZERO

    @property
    def net_amount(self) -> Decimal:
        return max(ZERO, self.price_amount - self.discount_amount - self.promo_discount_amount)


@attrs.frozen
class OrderQuote:
    seats: tuple[QuotedSeat, ...]
    promo: Optional[PromoResult] = None

    @property
    def subtotal(self) -> Decimal:
        return round2(sum((seat.price_amount for seat in self.seats), ZERO))

    @property
    def discount_total(self) -> Decimal:
        return round2(
            sum((s.discount_amount + s.promo_discount_amount for s in self.seats), ZERO)
        )

    @property
    def amount_due(self) -> Decimal:
        return round2(sum((seat.net_amount for seat in self.seats), ZERO))

    @property
    def amount_after_types(self) -> Decimal:
        return round2(sum((s.price_amount - s.discount_amount for s in self.seats), ZERO))


def price_seats(*, unit_price: Decimal, passengers: Sequence[PassengerFare]) -> list[QuotedSeat]:
    seats = []
    for passenger in passengers:
        discount_type = passenger.discount_type
        seats.append(
            QuotedSeat(
                seat_id=passenger.seat_id,
                price_amount=round2(unit_price),
                discount_type_id=discount_type.id if discount_type else None,
                discount_amount=discount_type.amount_for(unit_price) if discount_type else ZERO,
            )
        )
    return seats


def distribute_promo(seats: Sequence[QuotedSeat], amount: Decimal) -> list[QuotedSeat]:
    remaining = round2(amount)
    distributed = []
    for seat in seats:
        piece = max(ZERO, min(remaining, seat.price_amount - seat.discount_amount))
        remaining = round2(remaining - piece)
        distributed.append(attrs.evolve(seat, promo_discount_amount=piece))
    return distributed


def quote_order(
    *,
    unit_price: Decimal,
    passengers: Sequence[PassengerFare],
    promo: Optional[PromoCode] = None,
    promo_context: Optional[PromoContext] = None,
) -> OrderQuote:
    """Without a promo context the quote carries discount types only"""
    seats = price_seats(unit_price=unit_price, passengers=passengers)
    if promo_context is None:
        return OrderQuote(seats=tuple(seats))

    base_after_types = round2(sum((s.price_amount - s.discount_amount for s in seats), ZERO))
    result = evaluate_promo(promo, promo_context, base_amount=base_after_types)
    if result.valid:
        seats = distribute_promo(seats, result.discount_amount)
    return OrderQuote(seats=tuple(seats), promo=result)
