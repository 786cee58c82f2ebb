"""
Invalid answer descriptor.

Validators return an ``InvalidAnswer`` to reject a reply. It says what to
ask instead and, optionally, offers a one-click suggestion the user can
press or confirm with a "yes"-like reply:

    def check_magic_number(conversation, answer):
        if str(reply_value(answer)).strip() != "21":
            return (
                InvalidAnswer()
                .ask("Sorry, that's not it. Did you mean 21?")
                .suggest("Um, yeah for sure. 21", 21)
            )
        return 21
"""

from __future__ import annotations

from typing import Any

from askflow.core.domain.question import Button, Prompt, Question


class InvalidAnswer:
    """Rejection of a reply, with the prompt to show next."""

    def __init__(self, ask_text: str = "") -> None:
        self.ask_text = ask_text
        self.suggestion_text: str | None = None
        self.suggestion_value: Any = None

    def ask(self, text: str) -> "InvalidAnswer":
        """Set the prompt used to ask again."""
        self.ask_text = text
        return self

    def suggest(self, text: str, value: Any = None) -> "InvalidAnswer":
        """Offer a one-click correction. ``value`` defaults to ``text``."""
        self.suggestion_text = text
        self.suggestion_value = text if value is None else value
        return self

    @property
    def suggestion(self) -> Any:
        return self.suggestion_value

    @property
    def has_suggestion(self) -> bool:
        return bool(self.suggestion_text)

    def to_question(self) -> Prompt:
        """Render the re-ask prompt, with a suggestion button when one is set."""
        if not self.has_suggestion:
            return self.ask_text
        return Question(text=self.ask_text).add_button(
            Button(text=self.suggestion_text, value=self.suggestion_value)
        )

    def __repr__(self) -> str:
        return (
            f"InvalidAnswer(ask_text={self.ask_text!r}, "
            f"suggestion_text={self.suggestion_text!r}, "
            f"suggestion_value={self.suggestion_value!r})"
        )
