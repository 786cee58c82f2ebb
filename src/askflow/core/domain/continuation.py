"""
Question Continuation
=====================

A promise-like record of a question that is waiting for its reply, plus the
work queued to run once the reply is accepted.

Usage (inside a :class:`~askflow.core.domain.conversation.Conversation`):

    self.ask("What's the magic number?") \\
        .validate(check_magic_number) \\
        .then(congratulate) \\
        .then(announce_next)

``validate`` and ``then`` persist the continuation through the host, so the
process can exit right after the question is sent. When the reply arrives
(usually in another process) the host rebuilds the continuation from its
:class:`~askflow.core.domain.pending_state.PendingState` and calls
:meth:`QuestionContinuation.resolve`.

Limitations: handlers cannot return another continuation to wait on, and
there is no rejection callback. Rejection is modelled by validators
returning an :class:`~askflow.core.domain.invalid_answer.InvalidAnswer`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

import structlog

from askflow.core.domain.errors import ContinuationConsumedError, PreconditionError
from askflow.core.domain.handlers import HALT, HandlerRef, HandlerRegistry
from askflow.core.domain.pending_state import PendingState
from askflow.core.domain.question import Prompt

if TYPE_CHECKING:
    from askflow.core.domain.conversation import Conversation

logger = structlog.get_logger(__name__)

# Fields carrying this metadata never reach the pending-state record.
TRANSIENT: dict[str, Any] = {"persist": False}


@dataclass
class QuestionContinuation:
    """A pending question with its validator and handler queue.

    Attributes:
        question: The prompt that was sent.
        additional_parameters: Opaque transport parameters for the prompt.
        queue: Registered handler names, run in insertion order.
        validator: Registered validator name; None accepts any reply.
        attempt: Validation attempt number for this logical question.
        suggested: Value most recently offered as a one-click suggestion.
        conversation: Owning conversation. Rebound on every load.
        consumed: True once a reply has been handled.
    """

    question: Prompt = ""
    additional_parameters: dict[str, Any] = field(default_factory=dict)
    queue: list[str] = field(default_factory=list)
    validator: str | None = None
    attempt: int = 1
    suggested: Any = None
    conversation: "Conversation | None" = field(
        default=None, repr=False, compare=False, metadata=TRANSIENT
    )
    consumed: bool = field(default=False, compare=False, metadata=TRANSIENT)

    # ------------------------------------------------------------------
    # Builder API
    # ------------------------------------------------------------------

    def bind_conversation(self, conversation: "Conversation") -> "QuestionContinuation":
        """Attach the conversation this continuation belongs to."""
        self.conversation = conversation
        return self

    def set_attempt(self, attempt: int) -> "QuestionContinuation":
        if attempt < 1:
            raise ValueError(f"attempt must be positive, got {attempt}")
        self.attempt = attempt
        return self

    def set_suggested(self, suggested: Any) -> "QuestionContinuation":
        self.suggested = suggested
        return self

    def set_question(
        self, question: Prompt, additional_parameters: dict[str, Any] | None = None
    ) -> "QuestionContinuation":
        """Record what is being asked. Nothing is sent."""
        self.question = question
        self.additional_parameters = dict(additional_parameters or {})
        return self

    def validate(self, callback: HandlerRef) -> "QuestionContinuation":
        """Install the validator, replacing any previous one."""
        conversation = self._require_conversation("validate")
        self.validator = conversation.handlers.name_for(callback)
        self.persist()
        return self

    def then(self, callback: HandlerRef) -> "QuestionContinuation":
        """Queue a handler to run on the accepted value."""
        conversation = self._require_conversation("then")
        self.queue.append(conversation.handlers.name_for(callback))
        self.persist()
        return self

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, reply: Any) -> Any:
        """Handle the reply to this question.

        Returns the value produced by the last handler, or ``None`` when
        validation produced no usable value (handover request, re-ask) or a
        handler stopped the chain.

        Raises:
            PreconditionError: If no conversation is bound.
            ContinuationConsumedError: If a reply was already handled.
        """
        conversation = self._require_conversation("resolve")
        if self.consumed:
            raise ContinuationConsumedError(
                "This question has already been answered",
                details={"session_key": conversation.session_key},
            )
        self.consumed = True

        value = self.validate_answer(reply)
        if value is None or value is HALT:
            return None

        return self._run_queue(conversation, value)

    def validate_answer(self, reply: Any) -> Any:
        """Run the reply through the validator.

        Returns the accepted value, or ``None`` when the reply was a handover
        request or the conversation asked again. A re-ask takes over this
        continuation's validator and queue and is persisted in place of it.
        """
        conversation = self._require_conversation("validate_answer")
        validator = (
            conversation.handlers.resolve(self.validator) if self.validator else None
        )
        result = conversation.validate(
            reply,
            validator,
            suggestion=self.suggested,
            attempt=self.attempt,
            additional_parameters=self.additional_parameters,
        )

        if isinstance(result, QuestionContinuation):
            result.validator = self.validator
            result.queue = list(self.queue)
            result.persist()
            logger.info(
                "continuation.reasked",
                session_key=conversation.session_key,
                attempt=result.attempt,
                suggested=result.suggested,
            )
            return None

        return result

    def _run_queue(self, conversation: "Conversation", value: Any) -> Any:
        registry: HandlerRegistry = conversation.handlers
        result = value
        for position, name in enumerate(self.queue):
            callback = registry.resolve(name)
            result = callback(conversation, result)
            if result is None or result is HALT:
                logger.debug(
                    "continuation.halted",
                    session_key=conversation.session_key,
                    handler=name,
                    position=position,
                )
                return None
        return result

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def persist(self) -> "QuestionContinuation":
        """Store this continuation as the conversation's pending question."""
        conversation = self._require_conversation("persist")
        conversation.store(self)
        logger.debug(
            "continuation.persisted",
            session_key=conversation.session_key,
            handlers=len(self.queue),
            attempt=self.attempt,
        )
        return self

    def to_state(self) -> PendingState:
        """Build the persisted record. Transient fields are left out."""
        data = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.metadata.get("persist", True)
        }
        state = PendingState(
            question=data["question"],
            queue=list(data["queue"]),
            validator=data["validator"],
            attempt=data["attempt"],
            suggested=data["suggested"],
            additional_parameters=dict(data["additional_parameters"]),
        )
        if self.conversation is not None:
            state.conversation = self.conversation.registered_name()
            state.conversation_state = self.conversation.to_state()
        return state

    @classmethod
    def from_state(
        cls, state: PendingState, conversation: "Conversation | None" = None
    ) -> "QuestionContinuation":
        """Rebuild a pending continuation, optionally binding it right away."""
        continuation = cls(
            question=state.question,
            additional_parameters=dict(state.additional_parameters),
            queue=list(state.queue),
            validator=state.validator,
            attempt=state.attempt,
            suggested=state.suggested,
        )
        if conversation is not None:
            continuation.bind_conversation(conversation)
        return continuation

    def _require_conversation(self, operation: str) -> "Conversation":
        if self.conversation is None:
            raise PreconditionError(
                f"Cannot {operation} a question continuation without a conversation",
                details={"operation": operation},
            )
        return self.conversation
