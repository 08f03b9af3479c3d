from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StationResponse(BaseModel):
    station_id: int
    position: int
    name: str


class SeatResponse(BaseModel):
    seat_id: int
    vehicle_id: int
    label: str
    row: int
    col: int
    seat_type: str
    status: str  # free / partial / full / blocked
    hold_status: Optional[str] = None  # mine / other
    selectable: bool


class SeatMapResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'run_id': 12,
                'run_date': '2026-07-01',
                'departure_time': '07:30:00',
                'direction': 'tur',
                'boarding_started': False,
                'board_pos': 0,
                'exit_pos': 3,
                'free_count': 41,
                'free_by_vehicle': {'3': 41},
                'stations': [],
                'seats': [],
            }
        }
    )

    run_id: int
    run_date: date
    departure_time: time
    direction: str
    boarding_started: bool
    board_pos: int
    exit_pos: int
    free_count: int
    free_by_vehicle: dict[int, int]
    stations: list[StationResponse]
    seats: list[SeatResponse]


class IntentCreateRequest(BaseModel):
    seat_id: int = Field(..., gt=0)
    board_station_id: int = Field(..., gt=0)
    exit_station_id: int = Field(..., gt=0)

    class Config:
        json_schema_extra = {
            'example': {'seat_id': 105, 'board_station_id': 1, 'exit_station_id': 4}
        }


class IntentResponse(BaseModel):
    seat_id: int
    board_station_id: int
    exit_station_id: int
    board_pos: int
    exit_pos: int
    expires_at: datetime
    bound_to_order: bool = False
    renewed: bool = False


class IntentReleaseResponse(BaseModel):
    released: bool


class BoardingRequest(BaseModel):
    started: bool


class BoardingResponse(BaseModel):
    run_id: int
    boarding_started: bool
