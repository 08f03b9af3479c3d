from abc import ABC, abstractmethod

from src.service.inventory.domain.entity.seat_intent_entity import SeatIntent
from src.service.inventory.domain.value_object.seat_map import RunInfo, SeatOccupancy, SeatRecord


class ISeatInventoryQueryRepo(ABC):
    """Read side of seat inventory: runs, seats, reservations and live holds"""

    @abstractmethod
    async def get_run(self, *, run_id: int) -> RunInfo | None:
        """Run with its ordered station sequence, or None"""
        pass

    @abstractmethod
    async def list_seats(self, *, run_id: int, route_schedule_id: int) -> list[SeatRecord]:
        """Seats of every vehicle assigned to the run, with the schedule's online blocks"""
        pass

    @abstractmethod
    async def list_occupancies(self, *, run_id: int) -> list[SeatOccupancy]:
        """Active reservations and holds that have not lapsed"""
        pass

    @abstractmethod
    async def list_owned_intents(self, *, run_id: int, owner_key: str) -> list[SeatIntent]:
        pass
