from abc import ABC, abstractmethod


class IRunCommandRepo(ABC):
    @abstractmethod
    async def set_boarding_started(self, *, run_id: int, started: bool) -> bool:
        """Returns False when the run does not exist"""
        pass
