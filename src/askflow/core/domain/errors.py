"""Domain-specific exception types for askflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class AskflowError(Exception):
    """Base exception for askflow domain errors."""

    message: str
    code: str = "askflow_error"
    details: Dict[str, Any] | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.details is None:
            self.details = {}


class PreconditionError(AskflowError):
    """Raised when an operation runs before its required wiring is in place.

    The typical case is resolving a continuation that has no conversation
    bound to it.
    """

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="precondition_failed", details=details)


class ContinuationConsumedError(AskflowError):
    """Raised when a reply is delivered to a continuation that already handled one."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="continuation_consumed", details=details)


class StorageError(AskflowError):
    """Raised when pending conversation state cannot be stored or loaded."""

    def __init__(
        self,
        message: str,
        *,
        session_key: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if session_key:
            details.setdefault("session_key", session_key)
        self.session_key = session_key
        super().__init__(message=message, code="storage_error", details=details)


class HandlerNotFoundError(AskflowError):
    """Raised when a handler, validator or conversation name is not registered."""

    def __init__(
        self,
        message: str,
        *,
        handler_name: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if handler_name:
            details.setdefault("handler_name", handler_name)
        self.handler_name = handler_name
        super().__init__(message=message, code="handler_not_found", details=details)


class ConfigError(AskflowError):
    """Error raised for configuration failures."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="config_error", details=details)
