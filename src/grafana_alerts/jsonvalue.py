"""
Schema-free access to decoded Grafana JSON payloads.

Values are the plain ``json`` decoding result (dict / list / str / int /
float / bool / None). Accessors return ``None`` for a missing key or a value
of the wrong type instead of raising.
"""
from __future__ import annotations

import json
from typing import Any, Optional, Union

JsonValue = Union[dict, list, str, int, float, bool, None]


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def parse_object(text: str) -> Optional[dict[str, Any]]:
    """Parse *text* and return it only if the top-level value is an object."""
    value = _loads(text)
    return value if isinstance(value, dict) else None


def parse_array(text: str) -> Optional[list[Any]]:
    """Parse *text* and return it only if the top-level value is an array."""
    value = _loads(text)
    return value if isinstance(value, list) else None


def get_str(obj: Any, key: str) -> Optional[str]:
    if not isinstance(obj, dict):
        return None
    value = obj.get(key)
    return value if isinstance(value, str) else None


def is_nested(value: Any) -> bool:
    return isinstance(value, (dict, list))


def scalar_text(value: Any) -> Optional[str]:
    """String form of a JSON scalar; ``None`` for null, objects and arrays."""
    if value is None or is_nested(value):
        return None
    return str(value)


def stringify(value: Any) -> str:
    """String form of any JSON value. Nested values become indented JSON."""
    if is_nested(value):
        return json.dumps(value, indent=2, ensure_ascii=False)
    return scalar_text(value) or ""


def preview(text: str, limit: int = 100) -> str:
    if limit < len(text):
        return text[:limit] + "..."
    return text
