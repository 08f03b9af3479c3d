"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.inventory.app.command import (
    create_intent_use_case,
    release_intent_use_case,
    set_boarding_state_use_case,
)
from src.service.inventory.app.query import (
    get_seat_map_use_case,
    list_my_intents_use_case,
    stream_run_events_use_case,
)
from src.service.ordering.app.command import (
    cancel_order_use_case,
    confirm_payment_use_case,
    create_order_use_case,
    retry_payment_use_case,
)
from src.service.ordering.app.query import get_order_status_use_case
from src.service.promotion.app.query import quote_fare_use_case


WIRE_MODULES: list[ModuleType] = [
    create_intent_use_case,
    release_intent_use_case,
    set_boarding_state_use_case,
    get_seat_map_use_case,
    list_my_intents_use_case,
    stream_run_events_use_case,
    quote_fare_use_case,
    create_order_use_case,
    confirm_payment_use_case,
    retry_payment_use_case,
    cancel_order_use_case,
    get_order_status_use_case,
]
