from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, SmallInteger, String, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class OrderModel(Base):
    """Checkout aggregate; `order` is reserved in SQL so the table is booking_order"""

    __tablename__ = 'booking_order'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    owner_key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    run_id: Mapped[int] = mapped_column(ForeignKey('run.id'), nullable=False, index=True)
    board_station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    exit_station_id: Mapped[int] = mapped_column(ForeignKey('station.id'), nullable=False)
    board_pos: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    exit_pos: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    contact_name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_phone: Mapped[str] = mapped_column(String(30), nullable=False)
    contact_email: Mapped[str] = mapped_column(String(200), nullable=False)
    promo_code_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey('promo_code.id'), nullable=True
    )
    promo_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discount_total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amount_due: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    provider: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    provider_order_id: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, unique=True
    )
    payment_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class OrderItemModel(Base):
    __tablename__ = 'order_item'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('booking_order.id'), nullable=False, index=True
    )
    seat_id: Mapped[int] = mapped_column(ForeignKey('seat.id'), nullable=False)
    passenger_name: Mapped[str] = mapped_column(String(200), nullable=False)
    passenger_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    discount_type_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey('discount_type.id'), nullable=True
    )
    price_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    promo_discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=0
    )


class PaymentModel(Base):
    """
    One row per payment session, keyed by the provider correlation id.

    Written `pending` when the session is registered and moved to paid / failed /
    refund_required as the provider reports back. Retries add rows, so a webhook for
    an older session still finds its order.
    """

    __tablename__ = 'payment'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('booking_order.id'), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    provider_order_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
