"""Application layer: hosting conversations across turns."""

from askflow.application.factory import create_host
from askflow.application.host import ConversationHost
from askflow.application.logging_config import configure_logging

__all__ = ["ConversationHost", "configure_logging", "create_host"]
