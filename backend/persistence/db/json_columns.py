"""Encoding for the opaque JSON text columns."""

import json
from typing import Any


def encode_json(value: dict[str, Any] | None) -> str | None:
    if value is None:
        return None
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def decode_json(text: str | None) -> dict[str, Any] | None:
    """Decode a JSON column. Raises ValueError when the stored text is not a JSON object."""
    if text is None:
        return None
    value = json.loads(text)
    if not isinstance(value, dict):
        raise ValueError(f"Expected a JSON object, got {type(value).__name__}")
    return value
