"""Transport adapters."""

from askflow.infrastructure.transport.in_memory_transport import (
    InMemoryTransport,
    SentMessage,
)

__all__ = ["InMemoryTransport", "SentMessage"]
