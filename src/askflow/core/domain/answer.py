"""Incoming reply model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Attachment:
    """Media sent along with a reply.

    Attributes:
        kind: One of ``image``, ``video``, ``audio``, ``location``, ``file``.
        url: Where the transport made the media available, if anywhere.
        payload: Transport specific extras (coordinates for locations, etc.).
    """

    kind: str
    url: str = ""
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Answer:
    """A reply delivered by the transport for a pending question.

    Attributes:
        text: What the user typed (or the label of the pressed button).
        value: Button payload for interactive replies.
        interactive: True when the reply came from a one-click control.
        attachments: Media delivered with the reply.
        metadata: Transport specific extras.
    """

    text: str = ""
    value: Any = None
    interactive: bool = False
    attachments: tuple[Attachment, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def effective_value(self) -> Any:
        """The button payload when present, otherwise the text."""
        if self.value is not None:
            return self.value
        return self.text

    def attachments_of(self, kind: str) -> list[Attachment]:
        return [a for a in self.attachments if a.kind == kind]


def reply_value(reply: Any) -> Any:
    """Unwrap an :class:`Answer`; raw values are returned unchanged."""
    if isinstance(reply, Answer):
        return reply.effective_value
    return reply
