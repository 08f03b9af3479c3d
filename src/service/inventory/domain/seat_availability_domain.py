"""
Seat map composition.

Pure function over what the store returned: seats of the run's vehicles, active
reservations and holds. Lapsed holds are filtered here by time so the map never
depends on the reaper having run.

Status per seat, for the requested segment:
- blocked: seat blocked for online sales on the schedule
- full:    a reservation or live hold overlaps the segment
- partial: occupied only on segments that do not overlap
- free:    nothing on the seat

hold_status tells the requester whose holds sit on the seat: `mine` when one of them
is theirs, `other` when all belong to someone else. Owner keys never leave this module.

Driver and guide seats carry their occupancy status like any other seat but are never
selectable.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Optional

from src.service.inventory.domain.enum.seat_status import HoldStatus, SeatStatus
from src.service.inventory.domain.value_object.seat_map import (
    RunInfo,
    SeatMap,
    SeatOccupancy,
    SeatRecord,
    SeatView,
)
from src.service.shared_kernel.domain.value_object.segment import Segment, find_conflict


def hold_status_for(holds: Sequence[SeatOccupancy], *, owner_key: str) -> Optional[HoldStatus]:
    if any(hold.owner_key == owner_key for hold in holds):
        return HoldStatus.MINE
    if holds:
        return HoldStatus.OTHER
    return None


def seat_status_for(
    seat: SeatRecord, occupied: Sequence[Segment], segment: Segment
) -> SeatStatus:
    if seat.blocked_online:
        return SeatStatus.BLOCKED
    if find_conflict(occupied, segment).conflict:
        return SeatStatus.FULL
    if occupied:
        return SeatStatus.PARTIAL
    return SeatStatus.FREE


def compose_seat_map(
    *,
    run: RunInfo,
    seats: Iterable[SeatRecord],
    occupancies: Iterable[SeatOccupancy],
    segment: Segment,
    owner_key: str,
    now: datetime,
) -> SeatMap:
    occupied: dict[int, list[Segment]] = defaultdict(list)
    holds: dict[int, list[SeatOccupancy]] = defaultdict(list)

    for occupancy in occupancies:
        if not occupancy.is_live(now):
            continue
        occupied[occupancy.seat_id].append(occupancy.segment)
        if not occupancy.is_reservation:
            holds[occupancy.seat_id].append(occupancy)

    views = []
    for seat in seats:
        status = seat_status_for(seat, occupied.get(seat.id, []), segment)
        views.append(
            SeatView(
                seat_id=seat.id,
                vehicle_id=seat.vehicle_id,
                label=seat.label,
                row=seat.row,
                col=seat.col,
                seat_type=seat.seat_type,
                status=status,
                hold_status=hold_status_for(holds.get(seat.id, []), owner_key=owner_key),
                selectable=(
                    not run.boarding_started
                    and seat.is_bookable_type
                    and status in (SeatStatus.FREE, SeatStatus.PARTIAL)
                ),
            )
        )

    return SeatMap(run=run, segment=segment, seats=tuple(views))
