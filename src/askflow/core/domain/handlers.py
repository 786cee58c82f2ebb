"""
Handler registry for continuation callbacks.

Continuations outlive the process that created them, so validators and
follow-up handlers are persisted by name and looked up again when the reply
arrives. Every callable that ends up in a continuation must be registered:

    registry = HandlerRegistry()

    @registry.handler("greet")
    def greet(conversation, name):
        conversation.say(f"Nice to meet you, {name}")
        return name

Handlers receive the conversation as their first argument and the current
value as the second. Returning ``None`` or ``HALT`` stops the chain.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from askflow.core.domain.errors import HandlerNotFoundError

Handler = Callable[[Any, Any], Any]
HandlerRef = Union[str, Handler]


class _Halt:
    """Sentinel returned by a handler to stop the continuation chain."""

    _instance: Optional["_Halt"] = None

    def __new__(cls) -> "_Halt":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "HALT"

    def __bool__(self) -> bool:
        return False


HALT = _Halt()


def default_handler_name(func: Handler) -> str:
    return f"{func.__module__}.{func.__qualname__}"


class HandlerRegistry:
    """Name to callable mapping used to persist and restore callbacks."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, func: Handler, name: str | None = None) -> str:
        """Register ``func`` and return the name it is stored under.

        Re-registering the same name replaces the previous callable, which
        keeps module reloads harmless.
        """
        key = name or default_handler_name(func)
        self._handlers[key] = func
        return key

    def handler(self, name: str | None = None) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`register`."""

        def decorator(func: Handler) -> Handler:
            self.register(func, name)
            return func

        return decorator

    def resolve(self, name: str) -> Handler:
        try:
            return self._handlers[name]
        except KeyError:
            raise HandlerNotFoundError(
                f"No handler registered under '{name}'", handler_name=name
            ) from None

    def name_for(self, ref: HandlerRef) -> str:
        """Return the registered name for a handler reference.

        Raises:
            HandlerNotFoundError: If ``ref`` is an unknown name or an
                unregistered callable (closures and lambdas cannot be
                restored in a later turn).
        """
        if isinstance(ref, str):
            if ref not in self._handlers:
                raise HandlerNotFoundError(
                    f"No handler registered under '{ref}'", handler_name=ref
                )
            return ref

        for name, func in self._handlers.items():
            if func is ref:
                return name
        raise HandlerNotFoundError(
            f"Handler {default_handler_name(ref)} is not registered",
            handler_name=default_handler_name(ref),
        )

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    @property
    def names(self) -> list[str]:
        return sorted(self._handlers)
