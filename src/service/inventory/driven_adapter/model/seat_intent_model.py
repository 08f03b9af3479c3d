from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, SmallInteger, String, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID, ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class SeatIntentModel(Base):
    """Short-lived hold of a seat over a segment, owned by one requester"""

    __tablename__ = 'seat_intent'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(ForeignKey('run.id'), nullable=False)
    seat_id: Mapped[int] = mapped_column(ForeignKey('seat.id'), nullable=False)
    owner_key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    board_station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    exit_station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    board_pos: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    exit_pos: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    order_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True), nullable=True, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# At most one hold per overlapping (run, seat, segment); needs btree_gist for the `=` parts
_intent_table = SeatIntentModel.__table__
_intent_table.append_constraint(
    ExcludeConstraint(
        (_intent_table.c.run_id, '='),
        (_intent_table.c.seat_id, '='),
        (func.int4range(_intent_table.c.board_pos, _intent_table.c.exit_pos), '&&'),
        name='ex_seat_intent_overlap',
        using='gist',
    )
)
