"""
Question content model.

A prompt sent to the user is either plain text or a ``Question``: text plus
zero or more one-click ``Button`` controls. How buttons are drawn is up to
the transport; this module only carries the content and knows how to turn
it into JSON-compatible data for the pending-state record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from askflow.core.domain.serialization import to_dict_optional


@dataclass
class Button:
    """A one-click control. ``value`` is what the reply carries when pressed."""

    text: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.value is None:
            self.value = self.text

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Button":
        return cls(text=data["text"], value=data.get("value"))


@dataclass
class Question:
    """Prompt text with attached buttons."""

    text: str
    buttons: list[Button] = field(default_factory=list)
    callback_id: str = ""

    def add_button(self, button: Button) -> "Question":
        self.buttons.append(button)
        return self

    def add_buttons(self, buttons: list[Button]) -> "Question":
        self.buttons.extend(buttons)
        return self

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"text": self.text}
        to_dict_optional(result, "buttons", self.buttons)
        to_dict_optional(result, "callback_id", self.callback_id)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        return cls(
            text=data["text"],
            buttons=[Button.from_dict(b) for b in data.get("buttons", [])],
            callback_id=data.get("callback_id", ""),
        )


Prompt = Union[str, Question]


def question_text(question: Prompt) -> str:
    """Return the plain text of a prompt."""
    if isinstance(question, Question):
        return question.text
    return str(question)


def dump_question(question: Prompt) -> Any:
    """Serialize a prompt for storage. Plain text is stored as-is."""
    if isinstance(question, Question):
        return {"type": "question", **question.to_dict()}
    return question


def load_question(data: Any) -> Prompt:
    """Inverse of :func:`dump_question`."""
    if isinstance(data, dict) and data.get("type") == "question":
        payload = {k: v for k, v in data.items() if k != "type"}
        return Question.from_dict(payload)
    return data
