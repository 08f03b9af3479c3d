from enum import StrEnum


class DiscountKind(StrEnum):
    PERCENT = 'percent'
    FIXED = 'fixed'
