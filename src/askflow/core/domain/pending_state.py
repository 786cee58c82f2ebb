"""Persisted record of a question awaiting its reply."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from askflow.core.domain.question import Prompt, dump_question, load_question
from askflow.core.domain.serialization import to_dict_optional


@dataclass
class PendingState:
    """Everything needed to resume a conversation when the reply arrives.

    Attributes:
        question: The prompt that was sent.
        queue: Registered names of the handlers still to run, in order.
        validator: Registered validator name, or None to accept anything.
        attempt: Validation attempt number, starting at 1.
        suggested: Value offered as a one-click suggestion, if any.
        additional_parameters: Opaque transport parameters for the question.
        conversation: Registered name of the conversation class.
        conversation_state: The conversation's own persisted attributes.
    """

    question: Prompt
    queue: list[str] = field(default_factory=list)
    validator: str | None = None
    attempt: int = 1
    suggested: Any = None
    additional_parameters: dict[str, Any] = field(default_factory=dict)
    conversation: str | None = None
    conversation_state: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "question": dump_question(self.question),
            "queue": list(self.queue),
            "attempt": self.attempt,
        }
        to_dict_optional(result, "validator", self.validator)
        to_dict_optional(result, "suggested", self.suggested, skip_empty=False)
        to_dict_optional(result, "additional_parameters", self.additional_parameters)
        to_dict_optional(result, "conversation", self.conversation)
        to_dict_optional(result, "conversation_state", self.conversation_state)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingState":
        return cls(
            question=load_question(data["question"]),
            queue=list(data.get("queue", [])),
            validator=data.get("validator"),
            attempt=int(data.get("attempt", 1)),
            suggested=data.get("suggested"),
            additional_parameters=dict(data.get("additional_parameters", {})),
            conversation=data.get("conversation"),
            conversation_state=dict(data.get("conversation_state", {})),
        )
