from __future__ import annotations

import json
from typing import Any


class InvalidJSON(ValueError):
    """Raised when text (or bytes) is not a valid JSON document."""


def _reject_constant(name: str) -> Any:
    raise InvalidJSON(f"{name} is not valid JSON")


def parse_json(raw: str | bytes) -> Any:
    """
    Parse strict JSON text. Bytes are decoded as UTF-8.

    Raises InvalidJSON for undecodable bytes, malformed JSON, or NaN/Infinity.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        return json.loads(text, parse_constant=_reject_constant)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidJSON(str(e)) from e


def dump_json_document(payload: Any) -> str:
    """
    Compact JSON text for storage (no whitespace, non-ASCII kept as-is).
    """
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
