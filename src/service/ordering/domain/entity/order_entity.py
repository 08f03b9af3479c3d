from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

import attrs
from uuid_utils import UUID, uuid7

from src.platform.exception.exceptions import ConflictError, NotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.ordering.domain.enum.order_status import OrderStatus
from src.service.ordering.domain.value_object.contact import Contact
from src.service.ordering.domain.value_object.payment_session import PaymentSession
from src.service.shared_kernel.domain.value_object.segment import Segment


MAX_SEATS_PER_ORDER = 10


@attrs.define
class OrderItem:
    seat_id: int
    passenger_name: str
    price_amount: Decimal
    discount_amount: Decimal = Decimal('0.00')
    promo_discount_amount: Decimal = Decimal('0.00')
    discount_type_id: Optional[int] = None
    passenger_phone: Optional[str] = None
    id: Optional[int] = None

    @property
    def net_amount(self) -> Decimal:
        return self.price_amount - self.discount_amount - self.promo_discount_amount


@attrs.define
class Order:
    id: UUID
    owner_key: str
    run_id: int
    board_station_id: int
    exit_station_id: int
    segment: Segment
    contact: Contact
    subtotal: Decimal
    discount_total: Decimal
    amount_due: Decimal
    currency: str
    expires_at: datetime
    items: List[OrderItem] = attrs.field(factory=list)
    status: OrderStatus = OrderStatus.PENDING
    promo_code_id: Optional[int] = None
    promo_code: Optional[str] = None
    provider: Optional[str] = None
    provider_order_id: Optional[str] = None
    payment_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        owner_key: str,
        run_id: int,
        board_station_id: int,
        exit_station_id: int,
        segment: Segment,
        contact: Contact,
        items: List[OrderItem],
        subtotal: Decimal,
        discount_total: Decimal,
        amount_due: Decimal,
        currency: str,
        ttl_seconds: int,
        promo_code_id: Optional[int] = None,
        promo_code: Optional[str] = None,
    ) -> 'Order':
        if not items:
            raise ValidationError('At least one passenger is required')
        if len(items) > MAX_SEATS_PER_ORDER:
            raise ValidationError(f'Maximum {MAX_SEATS_PER_ORDER} seats per order')
        if len({item.seat_id for item in items}) != len(items):
            raise ValidationError('Each seat can appear only once per order')
        if any(not item.passenger_name.strip() for item in items):
            raise ValidationError('Passenger name is required for every seat')

        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            owner_key=owner_key,
            run_id=run_id,
            board_station_id=board_station_id,
            exit_station_id=exit_station_id,
            segment=segment,
            contact=contact,
            items=items,
            subtotal=subtotal,
            discount_total=discount_total,
            amount_due=amount_due,
            currency=currency,
            expires_at=now + timedelta(seconds=ttl_seconds),
            promo_code_id=promo_code_id,
            promo_code=promo_code,
            created_at=now,
            updated_at=now,
        )

    @property
    def seat_ids(self) -> list[int]:
        return [item.seat_id for item in self.items]

    @property
    def is_free(self) -> bool:
        return self.amount_due <= 0

    def is_overdue(self, now: datetime) -> bool:
        return self.status == OrderStatus.PENDING and self.expires_at <= now

    def effective_status(self, now: datetime) -> OrderStatus:
        """Polling view: a pending order past its deadline already reads as expired"""
        return OrderStatus.EXPIRED if self.is_overdue(now) else self.status

    def ensure_pending(self) -> None:
        if self.status != OrderStatus.PENDING:
            raise ConflictError(
                f'Order is {self.status}', code='ORDER_NOT_PENDING', status=str(self.status)
            )

    def ensure_owned_by(self, owner_key: str) -> None:
        if self.owner_key != owner_key:
            # Same answer as a missing order
            raise NotFoundError('Order not found')

    def with_payment_session(self, session: PaymentSession) -> 'Order':
        return attrs.evolve(
            self,
            provider=session.provider,
            provider_order_id=session.provider_order_id,
            payment_url=session.payment_url,
            updated_at=datetime.now(timezone.utc),
        )
