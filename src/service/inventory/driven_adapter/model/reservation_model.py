from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    SmallInteger,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID, ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class ReservationModel(Base):
    """Confirmed seat occupancy over a segment; `active` rows never overlap per seat"""

    __tablename__ = 'reservation'
    __table_args__ = (UniqueConstraint('order_id', 'seat_id', name='uq_reservation_order_seat'),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(ForeignKey('run.id'), nullable=False, index=True)
    seat_id: Mapped[int] = mapped_column(ForeignKey('seat.id'), nullable=False)
    order_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    board_station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    exit_station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    board_pos: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    exit_pos: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    passenger_name: Mapped[str] = mapped_column(String(200), nullable=False)
    passenger_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    price_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discount_type_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    promo_discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=0
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='active')
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


_reservation_table = ReservationModel.__table__
_reservation_table.append_constraint(
    ExcludeConstraint(
        (_reservation_table.c.run_id, '='),
        (_reservation_table.c.seat_id, '='),
        (
            func.int4range(_reservation_table.c.board_pos, _reservation_table.c.exit_pos),
            '&&',
        ),
        name='ex_reservation_active_overlap',
        using='gist',
        where=_reservation_table.c.status == 'active',
    )
)
