"""JSON format adapter."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from agaltypes.codecs import from_builtins, to_builtins

if TYPE_CHECKING:
    from agaltypes.types import DataType


def to_json(data_type: DataType | None, *, indent: int | None = None) -> str:
    """Serialize a data type to a JSON string in the backend wire format.

    Args:
        data_type: The type to serialize, None for an unknown type
        indent: JSON indentation level (default None for compact)

    Returns:
        JSON string representation

    """
    return json.dumps(to_builtins(data_type), indent=indent, default=str)


def from_json(s: str) -> DataType | None:
    """Deserialize a JSON string to a data type.

    Args:
        s: JSON string to deserialize

    Returns:
        The data type, or None for a JSON null

    Raises:
        ValueError: If the JSON doesn't contain a valid type object
        KeyError: If a required field is missing

    """
    data = json.loads(s)
    if data is not None and not isinstance(data, dict):
        msg = "Expected JSON object with 'class' field"
        raise ValueError(msg)
    return from_builtins(data)
