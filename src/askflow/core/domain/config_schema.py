"""
Configuration Schema Validation

Pydantic models for the conversation engine and its cache backends.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from askflow.core.domain.affirmative import DEFAULT_AFFIRMATIVE_WORDS


class ConversationSettings(BaseModel):
    """Behaviour of the question/validation engine."""

    model_config = ConfigDict(extra="forbid")

    affirmative_words: list[str] = Field(
        default_factory=lambda: list(DEFAULT_AFFIRMATIVE_WORDS),
        min_length=1,
        description="Words accepted as 'yes' to an offered suggestion",
    )
    handover_value: str = Field(
        "handover:request",
        min_length=1,
        description="Reply value that asks for a human instead of the bot",
    )
    handover_after_attempts: Optional[int] = Field(
        2,
        ge=1,
        description="Offer a handover once the attempt number exceeds this; None disables",
    )
    handover_conversation: Optional[str] = Field(
        None,
        description="Registered conversation started on a handover request",
    )
    handover_offer_text: str = Field(
        "Would you like to talk to a person instead?",
        description="Appended to the re-ask prompt when a handover is offered",
    )
    handover_button_text: str = Field(
        "Talk to a person",
        description="Label of the handover button",
    )
    cache_ttl_minutes: int = Field(
        30,
        ge=1,
        description="How long a pending question is kept",
    )

    @field_validator("affirmative_words")
    @classmethod
    def normalize_words(cls, value: list[str]) -> list[str]:
        words = [w.strip().casefold() for w in value]
        if any(not w or len(w.split()) != 1 for w in words):
            raise ValueError("affirmative words must be single non-empty tokens")
        return words


class CacheSettings(BaseModel):
    """Backend used for pending conversation state."""

    model_config = ConfigDict(extra="forbid")

    driver: Literal["array", "redis"] = Field(
        "array",
        description="'array' (in-process) or 'redis'",
    )
    host: str = Field("127.0.0.1", description="Redis host")
    port: int = Field(6379, ge=1, le=65535, description="Redis port")
    password: Optional[str] = Field(None, description="Redis AUTH password")
    db: int = Field(0, ge=0, description="Redis database index")
    key_prefix: str = Field(
        "askflow:cache:",
        min_length=1,
        description="Namespace prepended to every Redis key",
    )


class AskflowSettings(BaseModel):
    """Top-level settings document."""

    model_config = ConfigDict(extra="forbid")

    conversation: ConversationSettings = Field(default_factory=ConversationSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
