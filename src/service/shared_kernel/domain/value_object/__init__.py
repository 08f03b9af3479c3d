"""Shared Kernel Value Objects"""

from src.service.shared_kernel.domain.value_object.requester import Requester
from src.service.shared_kernel.domain.value_object.segment import (
    OverlapResult,
    Segment,
    StationStop,
    find_conflict,
    resolve_segment,
)

__all__ = [
    'OverlapResult',
    'Requester',
    'Segment',
    'StationStop',
    'find_conflict',
    'resolve_segment',
]
