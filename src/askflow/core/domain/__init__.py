"""
Domain Models and Business Logic

This package contains the question/validation/continuation engine:
- Question continuations and their persisted state
- The conversation base class and validation coordinator
- Invalid answer descriptors and the affirmative-answer matcher
- Configuration schemas
"""

from askflow.core.domain.affirmative import AffirmativeMatcher
from askflow.core.domain.answer import Answer, Attachment
from askflow.core.domain.continuation import QuestionContinuation
from askflow.core.domain.conversation import Conversation
from askflow.core.domain.handlers import HALT, HandlerRegistry
from askflow.core.domain.invalid_answer import InvalidAnswer
from askflow.core.domain.pending_state import PendingState
from askflow.core.domain.question import Button, Question

__all__ = [
    "AffirmativeMatcher",
    "Answer",
    "Attachment",
    "Button",
    "Conversation",
    "HALT",
    "HandlerRegistry",
    "InvalidAnswer",
    "PendingState",
    "Question",
    "QuestionContinuation",
]
