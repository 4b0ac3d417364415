"""
Key case conversion between Firebase's camelCase payloads and snake_case
Python dataclasses.
"""

from __future__ import annotations

import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    first, *rest = name.split("_")
    return first + "".join(part[:1].upper() + part[1:] for part in rest)


def convert_keys(data: Any, mode: str) -> Any:
    """
    Recursively converts dictionary keys.

    Args:
        data: A dict, list or scalar value.
        mode: Either "camel_to_snake" or "snake_to_camel".

    Returns:
        A copy of `data` with every dict key converted.
    """
    if mode == "camel_to_snake":
        convert = camel_to_snake
    elif mode == "snake_to_camel":
        convert = snake_to_camel
    else:
        raise ValueError(f"Unknown conversion mode: {mode}")

    if isinstance(data, dict):
        return {
            convert(key) if isinstance(key, str) else key: convert_keys(value, mode)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [convert_keys(item, mode) for item in data]
    return data
