from decimal import Decimal

import attrs

from src.service.promotion.domain.enum.discount_kind import DiscountKind
from src.service.promotion.domain.value_object.money import discount_off


@attrs.frozen
class DiscountType:
    """Per-passenger fare category (student, child...) offered online for a schedule"""

    id: int
    code: str
    label: str
    kind: DiscountKind
    value_off: Decimal

    def amount_for(self, price: Decimal) -> Decimal:
        return discount_off(kind=self.kind, value_off=self.value_off, base=price)
