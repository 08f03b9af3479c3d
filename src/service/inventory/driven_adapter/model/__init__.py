from src.service.inventory.driven_adapter.model.reservation_model import ReservationModel
from src.service.inventory.driven_adapter.model.route_model import (
    RouteModel,
    RouteScheduleModel,
    RouteStationModel,
    StationModel,
)
from src.service.inventory.driven_adapter.model.run_model import RunModel, RunVehicleModel
from src.service.inventory.driven_adapter.model.seat_intent_model import SeatIntentModel
from src.service.inventory.driven_adapter.model.vehicle_model import (
    SeatBlockModel,
    SeatModel,
    VehicleModel,
)

__all__ = [
    'ReservationModel',
    'RouteModel',
    'RouteScheduleModel',
    'RouteStationModel',
    'RunModel',
    'RunVehicleModel',
    'SeatBlockModel',
    'SeatIntentModel',
    'SeatModel',
    'StationModel',
    'VehicleModel',
]
