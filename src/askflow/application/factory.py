"""Assemble a ConversationHost from settings."""

from __future__ import annotations

from pathlib import Path

from askflow.application.host import ConversationHost
from askflow.core.domain.config_schema import AskflowSettings
from askflow.core.domain.handlers import HandlerRegistry
from askflow.core.interfaces.transport import TransportProtocol
from askflow.infrastructure.cache.factory import build_cache
from askflow.infrastructure.config.settings_loader import load_settings
from askflow.infrastructure.persistence.pending_state_store import (
    CachePendingStateStore,
)


def create_host(
    transport: TransportProtocol,
    *,
    settings: AskflowSettings | None = None,
    config_path: str | Path | None = None,
    handlers: HandlerRegistry | None = None,
) -> ConversationHost:
    """Build a host with the configured cache backend.

    ``settings`` wins over ``config_path``; with neither, settings are read
    from ``ASKFLOW_CONFIG`` / environment overrides.
    """
    resolved = settings or load_settings(config_path)
    store = CachePendingStateStore(build_cache(resolved.cache))
    return ConversationHost(transport, store, handlers=handlers, settings=resolved)
