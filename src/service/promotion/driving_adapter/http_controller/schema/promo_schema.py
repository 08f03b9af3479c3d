from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PromoValidateRequest(BaseModel):
    code: str
    run_id: int = Field(..., gt=0)
    board_station_id: int = Field(..., gt=0)
    exit_station_id: int = Field(..., gt=0)
    seat_count: int = Field(1, ge=1, le=20)
    discount_type_ids: list[Optional[int]] = []  # one entry per seat, null = full fare
    phone: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'code': 'SUMMER10',
                'run_id': 12,
                'board_station_id': 1,
                'exit_station_id': 4,
                'seat_count': 2,
                'discount_type_ids': [None, 3],
                'phone': '0722000000',
            }
        }


class PromoValidateResponse(BaseModel):
    valid: bool
    code: str
    reason: Optional[str] = None
    message: Optional[str] = None
    promo_code_id: Optional[int] = None
    discount_amount: Decimal = Decimal('0.00')
    combinable: bool = False
    base_amount: Decimal  # order amount after discount types
    amount_due: Decimal
