from sqlalchemy import Boolean, ForeignKey, Integer, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class VehicleModel(Base):
    __tablename__ = 'vehicle'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    plate_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)


class SeatModel(Base):
    __tablename__ = 'seat'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey('vehicle.id'), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(10), nullable=False)
    row: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    seat_col: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    seat_type: Mapped[str] = mapped_column(String(10), nullable=False, default='normal')


class SeatBlockModel(Base):
    """Operator block of a seat for online sales on every run of a schedule"""

    __tablename__ = 'seat_block'
    __table_args__ = (
        UniqueConstraint('route_schedule_id', 'seat_id', name='uq_seat_block_schedule_seat'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route_schedule_id: Mapped[int] = mapped_column(
        ForeignKey('route_schedule.id'), nullable=False
    )
    seat_id: Mapped[int] = mapped_column(ForeignKey('seat.id'), nullable=False)
    block_online: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
