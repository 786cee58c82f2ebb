"""In-memory transport implementation for local runs and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from askflow.core.domain.question import Prompt, question_text


@dataclass(frozen=True)
class SentMessage:
    """A message handed to the transport."""

    session_key: str
    message: Prompt
    additional_parameters: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return question_text(self.message)


class InMemoryTransport:
    """Records outgoing messages per session instead of delivering them."""

    def __init__(self) -> None:
        self._sent: list[SentMessage] = []

    def send(
        self,
        session_key: str,
        message: Prompt,
        additional_parameters: dict[str, Any] | None = None,
    ) -> None:
        self._sent.append(
            SentMessage(
                session_key=session_key,
                message=message,
                additional_parameters=dict(additional_parameters or {}),
            )
        )

    def sent(self, session_key: str | None = None) -> list[SentMessage]:
        if session_key is None:
            return list(self._sent)
        return [m for m in self._sent if m.session_key == session_key]

    def last(self, session_key: str) -> SentMessage | None:
        messages = self.sent(session_key)
        return messages[-1] if messages else None

    def clear(self) -> None:
        self._sent.clear()
