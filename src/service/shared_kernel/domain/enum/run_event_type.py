from enum import StrEnum


class RunEventType(StrEnum):
    """Refresh hints published to a run's room; clients re-fetch the seat map"""

    INTENTS_UPDATE = 'intents:update'  # hold / availability changed
    TRIP_UPDATE = 'trip:update'  # seat layout, vehicle or boarding state changed
