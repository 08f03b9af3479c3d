from datetime import datetime, time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Time,
    func,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class PromoCodeModel(Base):
    __tablename__ = 'promo_code'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)  # upper-case
    label: Mapped[str] = mapped_column(String(200), nullable=False, default='')
    type: Mapped[str] = mapped_column(String(10), nullable=False)  # percent / fixed
    value_off: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    valid_from: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    valid_to: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    channels: Mapped[str] = mapped_column(String(100), nullable=False, default='online')  # csv
    min_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    max_discount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    max_total_uses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_uses_per_person: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    combinable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class PromoCodeRouteModel(Base):
    __tablename__ = 'promo_code_route'

    promo_code_id: Mapped[int] = mapped_column(ForeignKey('promo_code.id'), primary_key=True)
    route_id: Mapped[int] = mapped_column(ForeignKey('route.id'), primary_key=True)


class PromoCodeScheduleModel(Base):
    __tablename__ = 'promo_code_schedule'

    promo_code_id: Mapped[int] = mapped_column(ForeignKey('promo_code.id'), primary_key=True)
    route_schedule_id: Mapped[int] = mapped_column(
        ForeignKey('route_schedule.id'), primary_key=True
    )


class PromoCodeHourModel(Base):
    __tablename__ = 'promo_code_hour'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    promo_code_id: Mapped[int] = mapped_column(
        ForeignKey('promo_code.id'), nullable=False, index=True
    )
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)


class PromoCodeWeekdayModel(Base):
    __tablename__ = 'promo_code_weekday'

    promo_code_id: Mapped[int] = mapped_column(ForeignKey('promo_code.id'), primary_key=True)
    weekday: Mapped[int] = mapped_column(SmallInteger, primary_key=True)  # 0 = Sunday


class PromoCodeUsageModel(Base):
    """One row per reservation paid with the code; source of the usage counters"""

    __tablename__ = 'promo_code_usage'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    promo_code_id: Mapped[int] = mapped_column(
        ForeignKey('promo_code.id'), nullable=False, index=True
    )
    order_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    reservation_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey('reservation.id'), nullable=True
    )
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True, index=True)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
