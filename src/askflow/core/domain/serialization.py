"""
Serialization Utilities
========================

Helper functions to reduce boilerplate in dataclass serialization.

Usage:
    from askflow.core.domain.serialization import to_dict_optional

    @dataclass
    class Button:
        text: str
        value: Any = None

        def to_dict(self) -> dict[str, Any]:
            result = {"text": self.text}
            to_dict_optional(result, "value", self.value)
            return result
"""

from enum import Enum
from typing import Any


def to_dict_optional(
    result: dict[str, Any],
    key: str,
    value: Any,
    default: Any = None,
    *,
    skip_empty: bool = True,
) -> None:
    """
    Add a key to result dict only if value differs from default.

    Args:
        result: Dictionary to add the key to (modified in place)
        key: Key name to add
        value: Value to add
        default: Default value to compare against (skip if equal)
        skip_empty: If True, also skip empty strings, lists, and dicts
    """
    if value is default or (value == default and type(value) is type(default)):
        return

    if skip_empty:
        if value == "" or value == [] or value == {}:
            return

    if isinstance(value, Enum):
        result[key] = value.value
    elif hasattr(value, "to_dict"):
        result[key] = value.to_dict()
    elif isinstance(value, list) and value and hasattr(value[0], "to_dict"):
        result[key] = [item.to_dict() for item in value]
    else:
        result[key] = value
