from abc import ABC, abstractmethod

import attrs


@attrs.frozen
class ReapResult:
    expired_orders: int = 0
    expired_intents: int = 0
    orphan_intents: int = 0
    skipped: bool = False
    run_ids: frozenset[int] = frozenset()

    @property
    def total(self) -> int:
        return self.expired_orders + self.expired_intents + self.orphan_intents


class IExpiryReaperRepo(ABC):
    @abstractmethod
    async def reap(self, *, grace_seconds: int, recent_payment_seconds: int) -> ReapResult:
        """
        One cleanup cycle under the cluster-wide reaper lock.

        Raises:
            LockBusyError: another process is reaping
        """
        pass
