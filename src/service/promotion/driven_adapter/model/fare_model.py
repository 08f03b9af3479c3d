from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class PriceListModel(Base):
    __tablename__ = 'price_list'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(ForeignKey('route.id'), nullable=False, index=True)
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)


class PriceListItemModel(Base):
    __tablename__ = 'price_list_item'
    __table_args__ = (
        UniqueConstraint(
            'price_list_id', 'from_station_id', 'to_station_id', name='uq_price_list_item_pair'
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    price_list_id: Mapped[int] = mapped_column(ForeignKey('price_list.id'), nullable=False)
    from_station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    to_station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)


class DiscountTypeModel(Base):
    __tablename__ = 'discount_type'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)  # percent / fixed
    value_off: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)


class ScheduleDiscountModel(Base):
    """Discount types offered on a route schedule"""

    __tablename__ = 'schedule_discount'

    route_schedule_id: Mapped[int] = mapped_column(
        ForeignKey('route_schedule.id'), primary_key=True
    )
    discount_type_id: Mapped[int] = mapped_column(ForeignKey('discount_type.id'), primary_key=True)
    visible_online: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
