from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from src.platform.types.uuid7_utils_types import UtilsUUID7


class PassengerSchema(BaseModel):
    seat_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=200)
    discount_type_id: Optional[int] = Field(None, gt=0)
    phone: Optional[str] = Field(None, max_length=32)


class ContactSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=6, max_length=32)
    email: str = Field(..., min_length=3, max_length=254)


class OrderCreateRequest(BaseModel):
    run_id: int = Field(..., gt=0)
    board_station_id: int = Field(..., gt=0)
    exit_station_id: int = Field(..., gt=0)
    passengers: list[PassengerSchema] = Field(..., min_length=1, max_length=10)
    contact: ContactSchema
    promo_code: Optional[str] = Field(None, max_length=64)

    class Config:
        json_schema_extra = {
            'example': {
                'run_id': 12,
                'board_station_id': 1,
                'exit_station_id': 4,
                'passengers': [
                    {'seat_id': 105, 'name': 'Ana Popescu'},
                    {'seat_id': 106, 'name': 'Ion Popescu', 'discount_type_id': 2},
                ],
                'contact': {
                    'name': 'Ana Popescu',
                    'phone': '+40722000111',
                    'email': 'ana@example.com',
                },
                'promo_code': 'SUMMER10',
            }
        }


class OrderItemResponse(BaseModel):
    seat_id: int
    passenger_name: str
    price_amount: Decimal
    discount_type_id: Optional[int] = None
    discount_amount: Decimal
    promo_discount_amount: Decimal


class OrderResponse(BaseModel):
    order_id: UtilsUUID7
    status: str
    run_id: int
    subtotal: Decimal
    discount_total: Decimal
    amount_due: Decimal
    currency: str
    expires_at: datetime
    promo_code: Optional[str] = None
    payment_url: Optional[str] = None
    items: list[OrderItemResponse]


class OrderStatusResponse(BaseModel):
    order_id: UtilsUUID7
    status: str  # pending / paid / expired / failed / cancelled
    amount_due: Decimal
    currency: str
    expires_at: datetime
    paid_at: Optional[datetime] = None
