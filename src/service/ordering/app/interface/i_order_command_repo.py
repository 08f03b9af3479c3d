from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal

import attrs
from uuid_utils import UUID

from src.service.ordering.domain.entity.order_entity import Order
from src.service.ordering.domain.enum.order_status import ConfirmOutcome, OrderStatus
from src.service.ordering.domain.value_object.payment_session import PaymentSession


@attrs.frozen
class ConfirmResult:
    order: Order
    outcome: ConfirmOutcome
    reservation_count: int = 0


class IOrderCommandRepo(ABC):
    @abstractmethod
    async def create_with_holds(self, *, order: Order) -> Order:
        """
        Persist the order and its items and bind the owner's live holds, atomically.

        Raises:
            ConflictError(code='INTENTS_EXPIRED'): a seat has no live hold of the owner
            ConflictError(code='SEAT_TAKEN'): an active reservation overlaps a seat
        """
        pass

    @abstractmethod
    async def get_by_id(self, *, order_id: UUID) -> Order | None:
        pass

    @abstractmethod
    async def get_by_provider_order_id(self, *, provider_order_id: str) -> Order | None:
        """Resolve any session of the order, not only the latest one"""
        pass

    @abstractmethod
    async def save_payment_session(self, *, order_id: UUID, session: PaymentSession) -> None:
        """Make `session` the order's current one and record it as a pending payment"""
        pass

    @abstractmethod
    async def mark_session_failed(self, *, provider_order_id: str) -> None:
        """pending -> failed for one payment session; other states are left alone"""
        pass

    @abstractmethod
    async def extend_holds(self, *, order_id: UUID, expires_at: datetime) -> Order:
        """
        Push the order deadline and its holds to `expires_at` (payment retry).

        Raises:
            ConflictError(code='ORDER_NOT_PENDING')
            ConflictError(code='INTENTS_EXPIRED'): some hold already lapsed
        """
        pass

    @abstractmethod
    async def confirm_paid(
        self, *, order_id: UUID, provider: str, provider_order_id: str, amount: Decimal
    ) -> ConfirmResult:
        """
        Mark paid and materialize reservations in one transaction; idempotent.

        Success reported by a session other than the one that paid, or for an order
        that is no longer pending, is recorded as refund_required instead.

        Raises:
            ConflictError(code='SEAT_TAKEN'): rolled back, order stays pending
        """
        pass

    @abstractmethod
    async def close(self, *, order_id: UUID, status: OrderStatus) -> Order | None:
        """
        pending -> failed/expired/cancelled and drop the order's holds.

        Returns the updated order, or None when the order was no longer pending.
        """
        pass
