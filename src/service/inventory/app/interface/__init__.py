"""Application layer interfaces (Ports)"""

from src.service.inventory.app.interface.i_intent_command_repo import (
    IIntentCommandRepo,
    IntentWriteResult,
)
from src.service.inventory.app.interface.i_run_command_repo import IRunCommandRepo
from src.service.inventory.app.interface.i_seat_inventory_query_repo import (
    ISeatInventoryQueryRepo,
)

__all__ = [
    'IIntentCommandRepo',
    'IRunCommandRepo',
    'ISeatInventoryQueryRepo',
    'IntentWriteResult',
]
