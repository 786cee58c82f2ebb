"""Protocols for the collaborators the conversation host talks to.

- TransportProtocol: delivers prompts to the user on some chat platform
- PendingStateStoreProtocol: keeps the pending question between turns
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from askflow.core.domain.pending_state import PendingState
from askflow.core.domain.question import Prompt


@runtime_checkable
class TransportProtocol(Protocol):
    """Send outgoing messages to a conversation's user."""

    def send(
        self,
        session_key: str,
        message: Prompt,
        additional_parameters: dict[str, Any] | None = None,
    ) -> None:
        """Deliver a message or question.

        Args:
            session_key: Conversation identity on the platform.
            message: Plain text or a Question with buttons.
            additional_parameters: Platform specific extras, passed through.
        """
        ...


@runtime_checkable
class PendingStateStoreProtocol(Protocol):
    """Keep one pending question per session key.

    Writes replace the previous record. ``load`` reads a record exactly once.
    """

    def store(self, session_key: str, state: PendingState, ttl_minutes: int) -> None:
        """Persist ``state`` for ``session_key``.

        Raises:
            StorageError: If the record cannot be written.
        """
        ...

    def load(self, session_key: str) -> PendingState | None:
        """Return and remove the pending record, or None if there is none.

        Raises:
            StorageError: If the record cannot be read or decoded.
        """
        ...

    def peek(self, session_key: str) -> PendingState | None:
        """Return the pending record without removing it."""
        ...

    def forget(self, session_key: str) -> None:
        """Drop the pending record, if any."""
        ...
