"""
Synchronization layer between the core and the preview/editor surfaces.
"""

from .bridge import InboundHandler, SyncBridge
from .channel import MessageChannel
from .events import InboundEvent, OutboundEvent

__all__ = ["InboundHandler", "SyncBridge", "MessageChannel", "InboundEvent", "OutboundEvent"]
