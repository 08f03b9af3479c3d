"""
Segment Overlap Resolver

Pure segment logic over station positions - no storage access.
A segment is the half-open range [board_pos, exit_pos) of station positions on the
run's (route, direction) station sequence.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

import attrs

from src.platform.exception.exceptions import ValidationError


@attrs.frozen
class Segment:
    board_pos: int
    exit_pos: int

    def __attrs_post_init__(self) -> None:
        if self.board_pos >= self.exit_pos:
            raise ValidationError(
                f'invalid segment: board position {self.board_pos} must be before '
                f'exit position {self.exit_pos}'
            )

    def overlaps(self, other: 'Segment') -> bool:
        # Touching ends do not overlap: [0,2) and [2,3) share no station leg
        return not (other.exit_pos <= self.board_pos or other.board_pos >= self.exit_pos)


@attrs.frozen
class OverlapResult:
    conflict: bool
    conflicting: Optional[Segment] = None


def find_conflict(existing: Iterable[Segment], candidate: Segment) -> OverlapResult:
    """
    Decide whether `candidate` conflicts with any existing range on the same seat and run.

    Returns the first conflicting range for diagnostics.
    """
    for segment in existing:
        if segment.overlaps(candidate):
            return OverlapResult(conflict=True, conflicting=segment)
    return OverlapResult(conflict=False)


@attrs.frozen
class StationStop:
    station_id: int
    position: int
    name: str = ''


def resolve_segment(
    stations: Sequence[StationStop], *, board_station_id: int, exit_station_id: int
) -> Segment:
    """Map board/exit station ids to positions on the run's station sequence"""
    positions = {stop.station_id: stop.position for stop in stations}
    if board_station_id not in positions:
        raise ValidationError(f'Station {board_station_id} is not on this route')
    if exit_station_id not in positions:
        raise ValidationError(f'Station {exit_station_id} is not on this route')
    return Segment(board_pos=positions[board_station_id], exit_pos=positions[exit_station_id])
