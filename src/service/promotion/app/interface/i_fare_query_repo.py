from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional

from src.service.promotion.domain.entity.discount_type_entity import DiscountType
from src.service.promotion.domain.entity.promo_code_entity import PromoCode


class IFareQueryRepo(ABC):
    """Fares, online discount types and promo codes"""

    @abstractmethod
    async def get_segment_price(
        self, *, route_id: int, from_station_id: int, to_station_id: int, on_date: date
    ) -> Optional[Decimal]:
        """Price of the segment from the price list in force on `on_date`"""
        pass

    @abstractmethod
    async def get_online_discount_types(
        self, *, route_schedule_id: int, discount_type_ids: Iterable[int]
    ) -> dict[int, DiscountType]:
        """Requested discount types that the schedule offers online, keyed by id"""
        pass

    @abstractmethod
    async def get_promo_code(self, *, code: str, phone: Optional[str]) -> Optional[PromoCode]:
        """
        Point-in-time read of the code with its scope rows and usage counts.

        Returns None for unknown codes; activity and validity windows are left to the
        evaluator.
        """
        pass
