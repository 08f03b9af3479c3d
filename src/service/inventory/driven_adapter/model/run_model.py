from datetime import date, time

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class RunModel(Base):
    """One scheduled departure of a route/direction on a date"""

    __tablename__ = 'run'
    __table_args__ = (
        UniqueConstraint('route_schedule_id', 'run_date', name='uq_run_schedule_date'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(ForeignKey('route.id'), nullable=False, index=True)
    route_schedule_id: Mapped[int] = mapped_column(
        ForeignKey('route_schedule.id'), nullable=False
    )
    direction: Mapped[str] = mapped_column(String(10), nullable=False)
    run_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    departure_time: Mapped[time] = mapped_column(Time, nullable=False)
    boarding_started: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class RunVehicleModel(Base):
    __tablename__ = 'run_vehicle'

    run_id: Mapped[int] = mapped_column(ForeignKey('run.id'), primary_key=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey('vehicle.id'), primary_key=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
