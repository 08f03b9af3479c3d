from datetime import date, datetime, time
from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.inventory.domain.enum.seat_status import HoldStatus, SeatStatus, SeatType
from src.service.shared_kernel.domain.value_object.segment import Segment, StationStop


@attrs.frozen
class RunInfo:
    id: int
    route_id: int
    route_schedule_id: int
    direction: str
    run_date: date
    departure_time: time
    boarding_started: bool
    stations: tuple[StationStop, ...] = ()


@attrs.frozen
class SeatRecord:
    id: int
    vehicle_id: int
    label: str
    row: int
    col: int
    seat_type: SeatType = SeatType.NORMAL
    blocked_online: bool = False

    @property
    def is_bookable_type(self) -> bool:
        return self.seat_type == SeatType.NORMAL


@attrs.frozen
class SeatOccupancy:
    """A reservation (owner_key is None) or a hold on a seat over a segment"""

    seat_id: int
    segment: Segment
    owner_key: Optional[str] = None
    expires_at: Optional[datetime] = None
    order_id: Optional[UUID] = None

    @property
    def is_reservation(self) -> bool:
        return self.expires_at is None

    def is_live(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now


@attrs.frozen
class SeatView:
    seat_id: int
    vehicle_id: int
    label: str
    row: int
    col: int
    seat_type: SeatType
    status: SeatStatus
    hold_status: Optional[HoldStatus]
    selectable: bool


@attrs.frozen
class SeatMap:
    run: RunInfo
    segment: Segment
    seats: tuple[SeatView, ...]

    @property
    def free_count(self) -> int:
        return sum(1 for seat in self.seats if seat.selectable)

    def free_count_by_vehicle(self) -> dict[int, int]:
        counts: dict[int, int] = {}
        for seat in self.seats:
            counts.setdefault(seat.vehicle_id, 0)
            if seat.selectable:
                counts[seat.vehicle_id] += 1
        return counts
