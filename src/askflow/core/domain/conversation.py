"""
Conversation base class and validation coordinator.

Authors subclass :class:`Conversation`, implement :meth:`Conversation.run`
and use ``ask``/``say`` to talk to the user:

    class MagicNumber(Conversation):
        def run(self):
            self.ask("What's the magic number?") \\
                .validate(check_magic_number) \\
                .then(congratulate)

Public attributes set on the instance are persisted with the pending
question and restored before the reply is handled, so handlers can keep
state on ``conversation`` between turns. Values must be JSON-compatible.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from askflow.core.domain.affirmative import AffirmativeMatcher
from askflow.core.domain.answer import reply_value
from askflow.core.domain.config_schema import ConversationSettings
from askflow.core.domain.continuation import QuestionContinuation
from askflow.core.domain.errors import PreconditionError
from askflow.core.domain.handlers import Handler, HandlerRef, HandlerRegistry
from askflow.core.domain.invalid_answer import InvalidAnswer
from askflow.core.domain.question import Button, Prompt, Question

if TYPE_CHECKING:
    from askflow.core.interfaces.host import ConversationHostProtocol

logger = structlog.get_logger(__name__)

# Markers stored in additional_parameters by the media ask variants.
GETTER_PARAMETER = "__getter"
REPEAT_PARAMETER = "__repeat"

IMAGES = "image"
VIDEOS = "video"
AUDIO = "audio"
LOCATION = "location"


class Conversation(ABC):
    """A multi-turn exchange with one user.

    Class attributes:
        conversation_name: Name the host registers the class under. Defaults
            to the dotted import path.
        cache_time: Minutes a pending question of this conversation is kept;
            None uses the configured default.
    """

    conversation_name: ClassVar[str | None] = None
    cache_time: ClassVar[int | None] = None

    host: "ConversationHostProtocol | None" = None
    session_key: str | None = None

    _TRANSIENT_ATTRIBUTES: ClassVar[frozenset[str]] = frozenset({"host", "session_key"})

    @abstractmethod
    def run(self) -> None:
        """Start the conversation."""

    # ------------------------------------------------------------------
    # Host wiring
    # ------------------------------------------------------------------

    def bind_host(self, host: "ConversationHostProtocol", session_key: str) -> "Conversation":
        self.host = host
        self.session_key = session_key
        return self

    @classmethod
    def registered_name(cls) -> str:
        return cls.conversation_name or f"{cls.__module__}.{cls.__qualname__}"

    @property
    def handlers(self) -> HandlerRegistry:
        return self._require_host().handlers

    @property
    def settings(self) -> ConversationSettings:
        if self.host is None:
            return ConversationSettings()
        return self.host.conversation_settings

    def to_state(self) -> dict[str, Any]:
        """Public instance attributes, minus the transient host wiring."""
        return {
            key: copy.deepcopy(value)
            for key, value in vars(self).items()
            if not key.startswith("_") and key not in self._TRANSIENT_ATTRIBUTES
        }

    def restore_state(self, state: dict[str, Any]) -> "Conversation":
        for key, value in state.items():
            setattr(self, key, value)
        return self

    def store(self, continuation: QuestionContinuation) -> None:
        self._require_host().store_conversation(self, continuation)

    def _require_host(self) -> "ConversationHostProtocol":
        if self.host is None or self.session_key is None:
            raise PreconditionError(
                f"Conversation {self.registered_name()} is not attached to a host",
            )
        return self.host

    # ------------------------------------------------------------------
    # Talking to the user
    # ------------------------------------------------------------------

    def say(
        self, message: Prompt, additional_parameters: dict[str, Any] | None = None
    ) -> "Conversation":
        host = self._require_host()
        host.reply(self.session_key, message, dict(additional_parameters or {}))
        return self

    def ask(
        self,
        question: Prompt,
        next: HandlerRef | None = None,
        additional_parameters: dict[str, Any] | None = None,
    ) -> "QuestionContinuation | Conversation":
        """Send ``question`` and return a continuation waiting for the reply.

        When ``next`` is given it is queued straight away and the
        conversation itself is returned.
        """
        parameters = dict(additional_parameters or {})
        self.say(question, parameters)

        continuation = (
            QuestionContinuation().set_question(question, parameters).bind_conversation(self)
        )
        if next is not None:
            continuation.then(next)
            return self
        return continuation

    def ask_for_images(
        self,
        question: Prompt,
        next: HandlerRef | None = None,
        repeat: HandlerRef | None = None,
        additional_parameters: dict[str, Any] | None = None,
    ) -> "QuestionContinuation | Conversation":
        return self._ask_for_media(IMAGES, question, next, repeat, additional_parameters)

    def ask_for_videos(
        self,
        question: Prompt,
        next: HandlerRef | None = None,
        repeat: HandlerRef | None = None,
        additional_parameters: dict[str, Any] | None = None,
    ) -> "QuestionContinuation | Conversation":
        return self._ask_for_media(VIDEOS, question, next, repeat, additional_parameters)

    def ask_for_audio(
        self,
        question: Prompt,
        next: HandlerRef | None = None,
        repeat: HandlerRef | None = None,
        additional_parameters: dict[str, Any] | None = None,
    ) -> "QuestionContinuation | Conversation":
        return self._ask_for_media(AUDIO, question, next, repeat, additional_parameters)

    def ask_for_location(
        self,
        question: Prompt,
        next: HandlerRef | None = None,
        repeat: HandlerRef | None = None,
        additional_parameters: dict[str, Any] | None = None,
    ) -> "QuestionContinuation | Conversation":
        return self._ask_for_media(LOCATION, question, next, repeat, additional_parameters)

    def _ask_for_media(
        self,
        kind: str,
        question: Prompt,
        next: HandlerRef | None,
        repeat: HandlerRef | None,
        additional_parameters: dict[str, Any] | None,
    ) -> "QuestionContinuation | Conversation":
        parameters = dict(additional_parameters or {})
        parameters[GETTER_PARAMETER] = kind
        parameters[REPEAT_PARAMETER] = (
            self.handlers.name_for(repeat) if repeat is not None else None
        )
        return self.ask(question, next, parameters)

    def repeat(self, question: Prompt | None = None) -> QuestionContinuation:
        """Ask the pending question again, keeping its validator and handlers.

        Only valid while a reply is being handled.
        """
        host = self._require_host()
        state = host.current_pending(self.session_key)
        if state is None:
            raise PreconditionError(
                "There is no pending question to repeat",
                details={"session_key": self.session_key},
            )

        prompt = question if question else state.question
        self.say(prompt, state.additional_parameters)
        continuation = QuestionContinuation.from_state(state, self)
        continuation.question = prompt
        return continuation.persist()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(
        self,
        reply: Any,
        validator: Handler | None,
        suggestion: Any = None,
        attempt: int = 1,
        additional_parameters: dict[str, Any] | None = None,
    ) -> Any:
        """Validate ``reply``, asking again when the validator rejects it.

        Returns one of:
            - the validated value (or the previously offered suggestion when
              the user said "yes" to it),
            - ``None`` when the reply asked for a human handover,
            - a new :class:`QuestionContinuation` when the question was
              asked again; its attempt is ``attempt + 1`` and it carries the
              new suggestion.

        Validator exceptions propagate unchanged.
        """
        if self.is_handover_request(reply):
            logger.info(
                "validation.handover_requested",
                session_key=self.session_key,
                attempt=attempt,
            )
            self.on_handover_request(reply)
            return None

        if validator is None:
            return reply

        result = validator(self, reply)
        if not isinstance(result, InvalidAnswer):
            return result

        if suggestion is not None and self.is_yes(reply):
            logger.info(
                "validation.suggestion_accepted",
                session_key=self.session_key,
                attempt=attempt,
            )
            return suggestion

        question = result.to_question()
        if self.should_offer_handover(attempt):
            question = self.offer_handover(question)

        logger.info(
            "validation.rejected",
            session_key=self.session_key,
            attempt=attempt,
            has_suggestion=result.has_suggestion,
        )
        continuation = self.ask(question, additional_parameters=additional_parameters)
        return continuation.set_attempt(attempt + 1).set_suggested(result.suggestion)

    def is_yes(self, reply: Any) -> bool:
        return AffirmativeMatcher(self.settings.affirmative_words).matches(reply)

    def is_handover_request(self, reply: Any) -> bool:
        return reply_value(reply) == self.settings.handover_value

    def on_handover_request(self, reply: Any) -> None:
        """Called when the user asks for a human. Override to route elsewhere."""
        if self.settings.handover_conversation and self.host is not None:
            self.host.start_handover(self, reply)

    def should_offer_handover(self, attempt: int) -> bool:
        threshold = self.settings.handover_after_attempts
        return threshold is not None and attempt > threshold

    def offer_handover(self, question: Prompt) -> Prompt:
        """Add a handover offer to a re-ask prompt.

        Nothing is added unless a handover conversation is configured.
        Override to render the offer differently.
        """
        settings = self.settings
        if not settings.handover_conversation:
            return question

        if isinstance(question, Question):
            offer = Question(
                text=question.text,
                buttons=list(question.buttons),
                callback_id=question.callback_id,
            )
        else:
            offer = Question(text=str(question))
        offer.text = f"{offer.text}\n\n{settings.handover_offer_text}"
        return offer.add_button(
            Button(text=settings.handover_button_text, value=settings.handover_value)
        )

    # ------------------------------------------------------------------
    # Hooks consulted by the host before a reply is resolved
    # ------------------------------------------------------------------

    def skips_conversation(self, reply: Any) -> bool:
        """True to leave the pending question untouched for this reply."""
        return False

    def stops_conversation(self, reply: Any) -> bool:
        """True to drop the pending question without handling this reply."""
        return False
