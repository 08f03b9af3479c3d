from datetime import datetime, timedelta, timezone
from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.shared_kernel.domain.value_object.segment import Segment


@attrs.define
class SeatIntent:
    """
    Short-lived hold of one seat on one run over a segment.

    Lapsed holds (expires_at <= now) are treated as absent everywhere, whether or not
    the reaper has removed them yet.
    """

    run_id: int
    seat_id: int
    owner_key: str
    board_station_id: int
    exit_station_id: int
    segment: Segment
    expires_at: datetime
    order_id: Optional[UUID] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        run_id: int,
        seat_id: int,
        owner_key: str,
        board_station_id: int,
        exit_station_id: int,
        segment: Segment,
        ttl_seconds: int,
    ) -> 'SeatIntent':
        now = datetime.now(timezone.utc)
        return cls(
            run_id=run_id,
            seat_id=seat_id,
            owner_key=owner_key,
            board_station_id=board_station_id,
            exit_station_id=exit_station_id,
            segment=segment,
            expires_at=now + timedelta(seconds=ttl_seconds),
            created_at=now,
        )

    def is_live(self, now: datetime) -> bool:
        return self.expires_at > now

    def is_owned_by(self, owner_key: str) -> bool:
        return self.owner_key == owner_key

    def is_bound(self) -> bool:
        return self.order_id is not None
