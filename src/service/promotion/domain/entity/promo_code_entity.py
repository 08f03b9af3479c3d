from datetime import datetime, time
from decimal import Decimal
from typing import Optional

import attrs

from src.service.promotion.domain.enum.discount_kind import DiscountKind


@attrs.frozen
class HourWindow:
    start: time
    end: time

    def contains(self, moment: time) -> bool:
        # Inclusive, compared at minute precision (HH:MM)
        hhmm = time(moment.hour, moment.minute)
        return self.start <= hhmm <= self.end


@attrs.frozen
class PromoCode:
    """
    Point-in-time read of a promo code: definition, scope rows and usage counts.

    Empty route, schedule, hour and weekday scopes mean "no restriction"; `channels` is a
    strict allow-list, so a code with none is valid nowhere. Usage counts are read from
    recorded usages for every evaluation, never cached.
    """

    id: int
    code: str
    kind: DiscountKind
    value_off: Decimal
    label: str = ''
    active: bool = True
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    channels: frozenset[str] = frozenset()
    min_price: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    max_total_uses: Optional[int] = None
    max_uses_per_person: Optional[int] = None
    combinable: bool = False
    route_ids: frozenset[int] = frozenset()
    schedule_ids: frozenset[int] = frozenset()
    hour_windows: tuple[HourWindow, ...] = ()
    weekdays: frozenset[int] = frozenset()  # 0 = Sunday
    total_uses: int = 0
    phone_uses: int = 0

    def is_available_at(self, now: datetime) -> bool:
        if not self.active:
            return False
        if self.valid_from is not None and now < self.valid_from:
            return False
        if self.valid_to is not None and now > self.valid_to:
            return False
        return True
