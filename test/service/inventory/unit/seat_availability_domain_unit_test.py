from datetime import datetime, timedelta, timezone

import attrs
import pytest

from src.service.inventory.domain.enum.seat_status import HoldStatus, SeatStatus, SeatType
from src.service.inventory.domain.seat_availability_domain import compose_seat_map
from src.service.inventory.domain.value_object.seat_map import SeatOccupancy, SeatRecord
from src.service.shared_kernel.domain.value_object.segment import Segment


NOW = datetime(2026, 7, 1, 6, 0, tzinfo=timezone.utc)
MINE = 'anon:me'
THEIRS = 'user:42'


def _seat(seat_id: int, **kwargs) -> SeatRecord:
    return SeatRecord(id=seat_id, vehicle_id=3, label=str(seat_id), row=1, col=seat_id, **kwargs)


def _hold(seat_id: int, board: int, exit_: int, owner: str, ttl: int = 60) -> SeatOccupancy:
    return SeatOccupancy(
        seat_id=seat_id,
        segment=Segment(board_pos=board, exit_pos=exit_),
        owner_key=owner,
        expires_at=NOW + timedelta(seconds=ttl),
    )


def _reservation(seat_id: int, board: int, exit_: int) -> SeatOccupancy:
    return SeatOccupancy(seat_id=seat_id, segment=Segment(board_pos=board, exit_pos=exit_))


class TestComposeSeatMap:
    @pytest.fixture
    def compose(self, run_info):
        def _compose(seats, occupancies, segment=Segment(board_pos=0, exit_pos=2), run=run_info):
            return compose_seat_map(
                run=run,
                seats=seats,
                occupancies=occupancies,
                segment=segment,
                owner_key=MINE,
                now=NOW,
            )

        return _compose

    def test_free_seat(self, compose):
        seat_map = compose([_seat(1)], [])

        view = seat_map.seats[0]
        assert view.status == SeatStatus.FREE
        assert view.hold_status is None
        assert view.selectable is True
        assert seat_map.free_count == 1

    def test_reservation_on_other_segment_is_partial(self, compose):
        seat_map = compose([_seat(1)], [_reservation(1, 2, 3)])

        assert seat_map.seats[0].status == SeatStatus.PARTIAL
        assert seat_map.seats[0].selectable is True

    def test_overlapping_reservation_is_full(self, compose):
        seat_map = compose([_seat(1)], [_reservation(1, 1, 3)])

        assert seat_map.seats[0].status == SeatStatus.FULL
        assert seat_map.seats[0].selectable is False

    def test_foreign_hold_blocks_overlap(self, compose):
        view = compose([_seat(1)], [_hold(1, 0, 1, THEIRS)]).seats[0]

        assert view.status == SeatStatus.FULL
        assert view.hold_status == HoldStatus.OTHER

    def test_own_hold_also_counts_and_is_reported_as_mine(self, compose):
        view = compose([_seat(1)], [_hold(1, 0, 2, MINE), _hold(1, 2, 3, THEIRS)]).seats[0]

        assert view.status == SeatStatus.FULL
        assert view.hold_status == HoldStatus.MINE

    def test_lapsed_hold_is_ignored(self, compose):
        view = compose([_seat(1)], [_hold(1, 0, 2, THEIRS, ttl=0)]).seats[0]

        assert view.status == SeatStatus.FREE
        assert view.hold_status is None

    def test_blocked_seats(self, compose):
        seat_map = compose([_seat(1, blocked_online=True), _seat(2)], [])

        statuses = [view.status for view in seat_map.seats]
        assert statuses == [SeatStatus.BLOCKED, SeatStatus.FREE]
        assert seat_map.free_count == 1

    def test_driver_and_guide_seats_keep_status_but_are_not_selectable(self, compose):
        seat_map = compose(
            [_seat(1, seat_type=SeatType.DRIVER), _seat(2, seat_type=SeatType.GUIDE)],
            [_reservation(2, 0, 2)],
        )

        driver, guide = seat_map.seats
        assert driver.status == SeatStatus.FREE
        assert guide.status == SeatStatus.FULL
        assert driver.selectable is False and guide.selectable is False
        assert seat_map.free_count == 0

    def test_boarding_started_makes_nothing_selectable(self, compose, run_info):
        run = attrs.evolve(run_info, boarding_started=True)

        seat_map = compose([_seat(1), _seat(2)], [], run=run)

        assert all(view.status == SeatStatus.FREE for view in seat_map.seats)
        assert seat_map.free_count == 0

    def test_seat_order_preserved_and_counts_by_vehicle(self, compose):
        seats = [
            _seat(5),
            SeatRecord(id=2, vehicle_id=9, label='2', row=1, col=2),
            _seat(1),
        ]

        seat_map = compose(seats, [_reservation(1, 0, 3)])

        assert [view.seat_id for view in seat_map.seats] == [5, 2, 1]
        assert seat_map.free_count_by_vehicle() == {3: 1, 9: 1}
