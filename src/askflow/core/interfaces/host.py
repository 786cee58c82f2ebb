"""Protocol for the host a conversation runs inside."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from askflow.core.domain.config_schema import ConversationSettings
from askflow.core.domain.handlers import HandlerRegistry
from askflow.core.domain.pending_state import PendingState
from askflow.core.domain.question import Prompt

if TYPE_CHECKING:
    from askflow.core.domain.continuation import QuestionContinuation
    from askflow.core.domain.conversation import Conversation


class ConversationHostProtocol(Protocol):
    """What a conversation needs from the process hosting it."""

    @property
    def handlers(self) -> HandlerRegistry:
        """Registry used to persist and restore callbacks."""
        ...

    @property
    def conversation_settings(self) -> ConversationSettings:
        """Validation and handover behaviour."""
        ...

    def reply(
        self,
        session_key: str,
        message: Prompt,
        additional_parameters: dict[str, Any] | None = None,
    ) -> None:
        """Send a message to the user of ``session_key``."""
        ...

    def store_conversation(
        self, conversation: "Conversation", continuation: "QuestionContinuation"
    ) -> None:
        """Persist ``continuation`` as the pending question of ``conversation``."""
        ...

    def current_pending(self, session_key: str) -> PendingState | None:
        """The pending record being handled this turn, if any."""
        ...

    def start_handover(self, conversation: "Conversation", reply: Any) -> None:
        """Hand the user over to the configured handover conversation."""
        ...
