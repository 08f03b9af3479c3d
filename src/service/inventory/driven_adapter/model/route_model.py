from datetime import time
from typing import Optional

from sqlalchemy import ForeignKey, Integer, SmallInteger, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class StationModel(Base):
    __tablename__ = 'station'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)


class RouteModel(Base):
    __tablename__ = 'route'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)


class RouteStationModel(Base):
    """Station sequence per (route, direction); position strictly increases along travel"""

    __tablename__ = 'route_station'
    __table_args__ = (
        UniqueConstraint('route_id', 'direction', 'station_id', name='uq_route_station_station'),
        UniqueConstraint('route_id', 'direction', 'position', name='uq_route_station_position'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(ForeignKey('route.id'), nullable=False, index=True)
    direction: Mapped[str] = mapped_column(String(10), nullable=False)  # tur / retur
    station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    position: Mapped[int] = mapped_column(SmallInteger, nullable=False)


class RouteScheduleModel(Base):
    __tablename__ = 'route_schedule'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(ForeignKey('route.id'), nullable=False, index=True)
    direction: Mapped[str] = mapped_column(String(10), nullable=False)
    departure_time: Mapped[time] = mapped_column(Time, nullable=False)
    operator_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
