"""
Conversation Host
=================

Runs conversations against a transport and a pending-state store.

One turn of a chat platform maps to one host call:

- ``start_conversation`` when the bot opens a conversation,
- ``handle_reply`` when a reply event arrives for a session.

Nothing is kept in memory between turns. ``handle_reply`` pulls the
pending record, rebuilds the conversation and its continuation from it and
resolves the reply; anything that needs to wait for another reply is
persisted again by the continuation itself.
"""

from __future__ import annotations

from typing import Any

import structlog

from askflow.core.domain.answer import Answer
from askflow.core.domain.config_schema import AskflowSettings, ConversationSettings
from askflow.core.domain.continuation import QuestionContinuation
from askflow.core.domain.conversation import (
    GETTER_PARAMETER,
    REPEAT_PARAMETER,
    Conversation,
)
from askflow.core.domain.errors import HandlerNotFoundError
from askflow.core.domain.handlers import HandlerRegistry
from askflow.core.domain.pending_state import PendingState
from askflow.core.domain.question import Prompt
from askflow.core.interfaces.logging import LoggerProtocol
from askflow.core.interfaces.transport import (
    PendingStateStoreProtocol,
    TransportProtocol,
)


class ConversationHost:
    """Wire conversations to a transport and a pending-state store.

    Args:
        transport: Delivers outgoing messages.
        store: Keeps one pending question per session key.
        handlers: Registry for validators and continuation handlers.
        settings: Engine settings; defaults apply when omitted.
        logger: Optional logger, a bound structlog logger by default.
    """

    def __init__(
        self,
        transport: TransportProtocol,
        store: PendingStateStoreProtocol,
        *,
        handlers: HandlerRegistry | None = None,
        settings: AskflowSettings | None = None,
        logger: LoggerProtocol | None = None,
    ) -> None:
        self._transport = transport
        self._store = store
        self._handlers = handlers or HandlerRegistry()
        self._settings = settings or AskflowSettings()
        self._conversations: dict[str, type[Conversation]] = {}
        self._active: dict[str, PendingState] = {}
        self.logger = logger or structlog.get_logger().bind(component="conversation_host")

    @property
    def handlers(self) -> HandlerRegistry:
        return self._handlers

    @property
    def conversation_settings(self) -> ConversationSettings:
        return self._settings.conversation

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_conversation(self, cls: type[Conversation]) -> type[Conversation]:
        """Make ``cls`` restorable from pending state. Usable as a decorator."""
        self._conversations[cls.registered_name()] = cls
        return cls

    def _conversation_class(self, name: str | None) -> type[Conversation]:
        cls = self._conversations.get(name or "")
        if cls is None:
            raise HandlerNotFoundError(
                f"No conversation registered under '{name}'", handler_name=name
            )
        return cls

    # ------------------------------------------------------------------
    # Outgoing side
    # ------------------------------------------------------------------

    def start_conversation(self, conversation: Conversation, session_key: str) -> Conversation:
        conversation.bind_host(self, session_key)
        self.logger.info(
            "host.conversation_started",
            session_key=session_key,
            conversation=conversation.registered_name(),
        )
        conversation.run()
        return conversation

    def reply(
        self,
        session_key: str,
        message: Prompt,
        additional_parameters: dict[str, Any] | None = None,
    ) -> None:
        self._transport.send(session_key, message, dict(additional_parameters or {}))

    def store_conversation(
        self, conversation: Conversation, continuation: QuestionContinuation
    ) -> None:
        ttl = conversation.cache_time or self.conversation_settings.cache_ttl_minutes
        self._store.store(conversation.session_key, continuation.to_state(), ttl)

    def start_handover(self, conversation: Conversation, reply: Any) -> None:
        name = self.conversation_settings.handover_conversation
        cls = self._conversations.get(name or "")
        if cls is None:
            self.logger.warning(
                "host.handover_unavailable",
                session_key=conversation.session_key,
                handover_conversation=name,
            )
            return
        self.logger.info(
            "host.handover_started",
            session_key=conversation.session_key,
            handover_conversation=name,
        )
        self.start_conversation(cls(), conversation.session_key)

    # ------------------------------------------------------------------
    # Incoming side
    # ------------------------------------------------------------------

    def has_pending(self, session_key: str) -> bool:
        return self._store.peek(session_key) is not None

    def current_pending(self, session_key: str) -> PendingState | None:
        return self._active.get(session_key)

    def handle_reply(self, session_key: str, reply: Any) -> Any:
        """Resolve ``reply`` against the pending question of ``session_key``.

        Returns whatever the continuation chain produced, or None when there
        was nothing pending, the reply was skipped or stopped, or the
        question was asked again.

        Raises:
            StorageError: If the pending record cannot be read or the next
                one cannot be written.
            HandlerNotFoundError: If the record names an unregistered
                conversation, validator or handler.
        """
        state = self._store.load(session_key)
        if state is None:
            self.logger.info("host.reply_without_pending", session_key=session_key)
            return None

        conversation = self._restore_conversation(state, session_key)

        if conversation.stops_conversation(reply):
            self.logger.info("host.conversation_stopped", session_key=session_key)
            return None
        if conversation.skips_conversation(reply):
            self.logger.info("host.reply_skipped", session_key=session_key)
            ttl = conversation.cache_time or self.conversation_settings.cache_ttl_minutes
            self._store.store(session_key, state, ttl)
            return None

        self._active[session_key] = state
        try:
            kind = state.additional_parameters.get(GETTER_PARAMETER)
            # A handover request never carries media; let validation handle it.
            if kind and not conversation.is_handover_request(reply):
                media = reply.attachments_of(kind) if isinstance(reply, Answer) else []
                if not media:
                    self._repeat_media_question(conversation, state, reply)
                    return None
                reply = media

            continuation = QuestionContinuation.from_state(state, conversation)
            return continuation.resolve(reply)
        finally:
            self._active.pop(session_key, None)

    def _restore_conversation(self, state: PendingState, session_key: str) -> Conversation:
        cls = self._conversation_class(state.conversation)
        # Restored like an unpickled object: __init__ is not run again.
        conversation = cls.__new__(cls)
        conversation.restore_state(state.conversation_state)
        conversation.bind_host(self, session_key)
        return conversation

    def _repeat_media_question(
        self, conversation: Conversation, state: PendingState, reply: Any
    ) -> None:
        self.logger.info(
            "host.media_missing",
            session_key=conversation.session_key,
            expected=state.additional_parameters.get(GETTER_PARAMETER),
        )
        repeat_name = state.additional_parameters.get(REPEAT_PARAMETER)
        if repeat_name:
            self._handlers.resolve(repeat_name)(conversation, reply)
        else:
            conversation.repeat()
