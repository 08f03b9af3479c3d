"""Run Event Broadcaster Interface (Port)

Per-run "rooms" for seat-map refresh hints.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from typing import Any

from src.service.shared_kernel.domain.enum.run_event_type import RunEventType


class IRunEventBroadcaster(ABC):
    """
    Best-effort broadcaster: publish never raises, consumers re-fetch state on
    every event instead of applying payloads as deltas.

    Channel: run_events:{run_id}
    """

    @abstractmethod
    async def publish(self, *, run_id: int, event: RunEventType) -> None:
        pass

    @abstractmethod
    def subscribe(self, *, run_id: int) -> AsyncGenerator[dict[str, Any], None]:
        """
        Join the run's room until the consumer stops iterating (leave).

        Yields:
            Event dictionaries {'event', 'run_id', 'timestamp'}
        """
        if False:
            yield {}
