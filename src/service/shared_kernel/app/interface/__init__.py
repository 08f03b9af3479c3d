"""Shared Kernel Interfaces"""

from src.service.shared_kernel.app.interface.i_run_event_broadcaster import IRunEventBroadcaster

__all__ = ['IRunEventBroadcaster']
