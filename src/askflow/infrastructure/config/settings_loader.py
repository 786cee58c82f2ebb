"""
Settings loading.

Reads an optional YAML file, applies ``ASKFLOW_*`` environment overrides
and validates the result against :class:`AskflowSettings`.

Example ``askflow.yaml``::

    conversation:
      affirmative_words: [yes, y, yep, yup, ok, oui, ja]
      handover_after_attempts: 3
      handover_conversation: support.Handover
    cache:
      driver: redis
      host: redis.internal
      password: secret

Environment overrides:
    ASKFLOW_CACHE_DRIVER, ASKFLOW_REDIS_HOST, ASKFLOW_REDIS_PORT,
    ASKFLOW_REDIS_PASSWORD, ASKFLOW_REDIS_DB, ASKFLOW_CACHE_PREFIX,
    ASKFLOW_CACHE_TTL_MINUTES, ASKFLOW_HANDOVER_CONVERSATION
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml
from pydantic import ValidationError

from askflow.core.domain.config_schema import AskflowSettings
from askflow.core.domain.errors import ConfigError

logger = structlog.get_logger(__name__)

# env var -> (section, field)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "ASKFLOW_CACHE_DRIVER": ("cache", "driver"),
    "ASKFLOW_REDIS_HOST": ("cache", "host"),
    "ASKFLOW_REDIS_PORT": ("cache", "port"),
    "ASKFLOW_REDIS_PASSWORD": ("cache", "password"),
    "ASKFLOW_REDIS_DB": ("cache", "db"),
    "ASKFLOW_CACHE_PREFIX": ("cache", "key_prefix"),
    "ASKFLOW_CACHE_TTL_MINUTES": ("conversation", "cache_ttl_minutes"),
    "ASKFLOW_HANDOVER_CONVERSATION": ("conversation", "handover_conversation"),
}


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Settings file must contain a mapping: {path}",
            details={"path": str(path)},
        )
    return data


def _apply_env(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    for var, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        data.setdefault(section, {})[key] = value
    return data


def load_settings(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AskflowSettings:
    """Load and validate settings.

    Args:
        path: YAML settings file. When None, ``ASKFLOW_CONFIG`` is used if
            set, otherwise defaults plus environment overrides apply.
        environ: Environment mapping, ``os.environ`` by default.

    Raises:
        FileNotFoundError: If an explicit settings file does not exist.
        ConfigError: If the file or the overrides fail validation.
    """
    env = os.environ if environ is None else environ
    config_path = path or env.get("ASKFLOW_CONFIG")

    data: dict[str, Any] = {}
    if config_path:
        resolved = Path(config_path)
        if not resolved.exists():
            raise FileNotFoundError(f"Settings file not found: {config_path}")
        data = _read_yaml(resolved)

    data = _apply_env(data, env)

    try:
        settings = AskflowSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid askflow settings: {exc.error_count()} error(s)",
            details={"errors": exc.errors(include_url=False), "path": str(config_path or "")},
        ) from exc

    logger.debug(
        "settings.loaded",
        path=str(config_path) if config_path else None,
        cache_driver=settings.cache.driver,
    )
    return settings
