from enum import StrEnum


class SeatStatus(StrEnum):
    FREE = 'free'
    PARTIAL = 'partial'  # occupied on some other segment, free on the requested one
    FULL = 'full'
    BLOCKED = 'blocked'


class HoldStatus(StrEnum):
    MINE = 'mine'
    OTHER = 'other'


class SeatType(StrEnum):
    NORMAL = 'normal'
    DRIVER = 'driver'
    GUIDE = 'guide'
