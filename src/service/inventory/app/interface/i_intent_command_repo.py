from abc import ABC, abstractmethod

import attrs

from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent


@attrs.frozen
class IntentWriteResult:
    intent: SeatIntent
    renewed: bool = False


class IIntentCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, intent: SeatIntent, ttl_seconds: int) -> IntentWriteResult:
        """
        Create or renew the requester's hold in one transaction.

        - Lapsed holds on the seat are dropped first
        - An identical live hold of the same owner is renewed (idempotent)
        - The owner's other unbound holds overlapping the new segment are replaced

        Raises:
            ConflictError(code='SEAT_HELD'): another live hold overlaps
            ConflictError(code='SEAT_TAKEN'): an active reservation overlaps
        """
        pass

    @abstractmethod
    async def release(self, *, run_id: int, seat_id: int, owner_key: str) -> int:
        """Delete the owner's unbound holds on the seat; returns the number removed"""
        pass
