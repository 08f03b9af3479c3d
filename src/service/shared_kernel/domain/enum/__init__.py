"""Shared Kernel Enums"""

from src.service.shared_kernel.domain.enum.run_event_type import RunEventType

__all__ = ['RunEventType']
