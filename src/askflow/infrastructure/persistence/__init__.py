"""Persistence adapters for pending conversation state."""

from askflow.infrastructure.persistence.pending_state_store import (
    CachePendingStateStore,
)

__all__ = ["CachePendingStateStore"]
