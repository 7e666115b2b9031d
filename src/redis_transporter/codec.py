"""Record serialization for Redis hashes.

Hash values are always strings, so:
- None is stored as NULL_SENTINEL
- nested objects and arrays are stored as JSON text
- every other scalar is stored as its string form

Decoding never raises. A value that looks like JSON but does not parse is
kept as a plain string so partially written records can still be read.

String values equal to NULL_SENTINEL or written in JSON object or array
syntax do not round-trip: they decode to None or to the parsed structure.
"""

import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from redis_transporter.errors import CodecError

NULL_SENTINEL = "##null##"

Record = dict[str, Any]


def _pairs(fields: Mapping[str, Any] | Sequence[Any]) -> list[tuple[Any, Any]]:
    if isinstance(fields, Mapping):
        return list(fields.items())
    flat = list(fields)
    return list(zip(flat[0::2], flat[1::2]))


def _as_text(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def decode_value(value: Any) -> Any:
    """Decode a single stored value."""
    value = _as_text(value)
    if not isinstance(value, str):
        return value
    if value == NULL_SENTINEL:
        return None

    stripped = value.strip()
    if stripped[:1] in ("{", "[") and stripped[-1:] in ("}", "]"):
        try:
            return json.loads(stripped)
        except ValueError:
            return value
    return value


def decode(fields: Mapping[str, Any] | Sequence[Any]) -> Record:
    """Turn raw hash fields into a record.

    Args:
        fields: Mapping as returned by ``HGETALL``, or a flat
            ``[field, value, field, value, ...]`` sequence

    Returns:
        Record with sentinels decoded to None and JSON values parsed
    """
    return {_as_text(name): decode_value(value) for name, value in _pairs(fields)}


def encode_value(value: Any) -> str:
    """Encode a single value for storage."""
    if value is None:
        return NULL_SENTINEL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, default=_json_default)
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot serialize nested value: {e}") from e
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode(record: Mapping[str, Any]) -> dict[str, str]:
    """Turn a record into hash fields for ``HSET``."""
    return {str(name): encode_value(value) for name, value in record.items()}


def to_record(record_id: str, fields: Mapping[str, Any] | Sequence[Any]) -> Record:
    """Decode hash fields and attach the requested id."""
    record = decode(fields)
    record.pop("id", None)
    return {"id": record_id, **record}
