"""
Core Protocol Interfaces

Contracts for everything the conversation engine depends on but does not
implement itself: the chat transport, pending-state storage, the cache
behind it and the hosting process.
"""

from askflow.core.interfaces.cache import CacheProtocol
from askflow.core.interfaces.host import ConversationHostProtocol
from askflow.core.interfaces.logging import LoggerProtocol
from askflow.core.interfaces.transport import (
    PendingStateStoreProtocol,
    TransportProtocol,
)

__all__ = [
    "CacheProtocol",
    "ConversationHostProtocol",
    "LoggerProtocol",
    "PendingStateStoreProtocol",
    "TransportProtocol",
]
