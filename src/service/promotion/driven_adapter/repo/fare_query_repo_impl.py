"""
Fare Query Repository Implementation - ORM read side

Promo codes are read together with their scope rows and live usage counts in one
session so the evaluator sees a single point in time.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.promotion.app.interface.i_fare_query_repo import IFareQueryRepo
from src.service.promotion.domain.entity.discount_type_entity import DiscountType
from src.service.promotion.domain.entity.promo_code_entity import HourWindow, PromoCode
from src.service.promotion.domain.enum.discount_kind import DiscountKind
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


class FareQueryRepoImpl(IFareQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_segment_price(
        self, *, route_id: int, from_station_id: int, to_station_id: int, on_date: date
    ) -> Optional[Decimal]:
        async with self.session_factory() as session:
            stmt = (
                select(PriceListItemModel.price)
                .join(PriceListModel, PriceListModel.id == PriceListItemModel.price_list_id)
                .where(
                    PriceListModel.route_id == route_id,
                    PriceListModel.effective_from <= on_date,
                    PriceListItemModel.from_station_id == from_station_id,
                    PriceListItemModel.to_station_id == to_station_id,
                )
                .order_by(PriceListModel.effective_from.desc(), PriceListModel.id.desc())
                .limit(1)
            )
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    @Logger.io
    async def get_online_discount_types(
        self, *, route_schedule_id: int, discount_type_ids: Iterable[int]
    ) -> dict[int, DiscountType]:
        ids = sorted(set(discount_type_ids))
        if not ids:
            return {}

        async with self.session_factory() as session:
            stmt = (
                select(DiscountTypeModel)
                .join(
                    ScheduleDiscountModel,
                    ScheduleDiscountModel.discount_type_id == DiscountTypeModel.id,
                )
                .where(
                    ScheduleDiscountModel.route_schedule_id == route_schedule_id,
                    ScheduleDiscountModel.visible_online.is_(True),
                    DiscountTypeModel.id.in_(ids),
                )
            )
            result = await session.execute(stmt)
            return {
                model.id: DiscountType(
                    id=model.id,
                    code=model.code,
                    label=model.label,
                    kind=DiscountKind(model.type),
                    value_off=model.value_off,
                )
                for model in result.scalars().all()
            }

    @Logger.io
    async def get_promo_code(self, *, code: str, phone: Optional[str]) -> Optional[PromoCode]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PromoCodeModel).where(func.upper(PromoCodeModel.code) == code.upper())
            )
            promo = result.scalar_one_or_none()
            if promo is None:
                return None

            route_ids = await session.scalars(
                select(PromoCodeRouteModel.route_id).where(
                    PromoCodeRouteModel.promo_code_id == promo.id
                )
            )
            schedule_ids = await session.scalars(
                select(PromoCodeScheduleModel.route_schedule_id).where(
                    PromoCodeScheduleModel.promo_code_id == promo.id
                )
            )
            hours = await session.execute(
                select(PromoCodeHourModel.start_time, PromoCodeHourModel.end_time).where(
                    PromoCodeHourModel.promo_code_id == promo.id
                )
            )
            weekdays = await session.scalars(
                select(PromoCodeWeekdayModel.weekday).where(
                    PromoCodeWeekdayModel.promo_code_id == promo.id
                )
            )
            total_uses = await session.scalar(
                select(func.count(PromoCodeUsageModel.id)).where(
                    PromoCodeUsageModel.promo_code_id == promo.id
                )
            )
            phone_uses = 0
            if phone:
                phone_uses = await session.scalar(
                    select(func.count(PromoCodeUsageModel.id)).where(
                        PromoCodeUsageModel.promo_code_id == promo.id,
                        PromoCodeUsageModel.phone == phone,
                    )
                )

            return PromoCode(
                id=promo.id,
                code=promo.code,
                label=promo.label,
                kind=DiscountKind(promo.type),
                value_off=promo.value_off,
                active=promo.active,
                valid_from=promo.valid_from,
                valid_to=promo.valid_to,
                channels=frozenset(
                    c.strip().lower() for c in (promo.channels or '').split(',') if c.strip()
                ),
                min_price=promo.min_price,
                max_discount=promo.max_discount,
                max_total_uses=promo.max_total_uses,
                max_uses_per_person=promo.max_uses_per_person,
                combinable=promo.combinable,
                route_ids=frozenset(route_ids.all()),
                schedule_ids=frozenset(schedule_ids.all()),
                hour_windows=tuple(
                    HourWindow(start=row.start_time, end=row.end_time) for row in hours.all()
                ),
                weekdays=frozenset(weekdays.all()),
                total_uses=total_uses or 0,
                phone_uses=phone_uses or 0,
            )
