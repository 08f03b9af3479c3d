from src.service.inventory.domain.enum.seat_status import HoldStatus, SeatStatus, SeatType

__all__ = ['HoldStatus', 'SeatStatus', 'SeatType']
