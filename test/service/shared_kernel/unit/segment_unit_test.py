import pytest

from src.platform.exception.exceptions import ValidationError
from src.service.shared_kernel.domain.value_object.segment import (
    Segment,
    StationStop,
    find_conflict,
    resolve_segment,
)


class TestSegmentOverlap:
    @pytest.mark.parametrize(
        'a, b, expected',
        [
            ((0, 2), (2, 3), False),  # touching ends
            ((2, 3), (0, 2), False),
            ((0, 3), (1, 2), True),  # containment
            ((1, 2), (0, 3), True),
            ((0, 2), (1, 3), True),  # partial
            ((0, 3), (0, 3), True),  # identical
            ((0, 1), (2, 3), False),  # disjoint
        ],
    )
    def test_overlap_is_half_open_and_symmetric(self, a, b, expected):
        seg_a = Segment(board_pos=a[0], exit_pos=a[1])
        seg_b = Segment(board_pos=b[0], exit_pos=b[1])

        assert seg_a.overlaps(seg_b) is expected
        assert seg_b.overlaps(seg_a) is expected

    @pytest.mark.parametrize('board, exit_', [(2, 2), (3, 1)])
    def test_reject_empty_or_reversed_segment(self, board, exit_):
        with pytest.raises(ValidationError):
            Segment(board_pos=board, exit_pos=exit_)


class TestFindConflict:
    def test_no_existing_ranges(self):
        result = find_conflict([], Segment(board_pos=0, exit_pos=3))

        assert result.conflict is False
        assert result.conflicting is None

    def test_returns_first_conflicting_range(self):
        existing = [
            Segment(board_pos=0, exit_pos=1),
            Segment(board_pos=2, exit_pos=4),
            Segment(board_pos=3, exit_pos=5),
        ]

        result = find_conflict(existing, Segment(board_pos=1, exit_pos=3))

        assert result.conflict is True
        assert result.conflicting == Segment(board_pos=2, exit_pos=4)

    def test_back_to_back_segments_do_not_conflict(self):
        existing = [Segment(board_pos=0, exit_pos=2), Segment(board_pos=3, exit_pos=4)]

        assert find_conflict(existing, Segment(board_pos=2, exit_pos=3)).conflict is False


class TestResolveSegment:
    def test_maps_station_ids_to_positions(self, stations):
        segment = resolve_segment(stations, board_station_id=12, exit_station_id=14)

        assert segment == Segment(board_pos=1, exit_pos=3)

    def test_unknown_station(self, stations):
        with pytest.raises(ValidationError, match='not on this route'):
            resolve_segment(stations, board_station_id=99, exit_station_id=14)

    def test_exit_before_board(self, stations):
        with pytest.raises(ValidationError):
            resolve_segment(stations, board_station_id=14, exit_station_id=11)

    def test_same_station(self):
        stops = [StationStop(station_id=1, position=0), StationStop(station_id=2, position=1)]

        with pytest.raises(ValidationError):
            resolve_segment(stops, board_station_id=1, exit_station_id=1)
