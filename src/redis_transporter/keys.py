"""Redis key layout.

Key patterns:
- {prefix}:{type}:{id}   typed record
- {prefix}:{id}          untyped record
- {prefix}:{pattern}*    enumeration glob

Segments are joined literally. Ids or types containing ``:`` are not
escaped, so they may collide with other keys.
"""

SEPARATOR = ":"


def _require(value: str | None, name: str) -> None:
    if not value:
        raise ValueError(f"{name} must be a non-empty string")


def build_key(prefix: str, type: str | None, id: str) -> str:
    """Build the key of a single record.

    Args:
        prefix: Namespace for all keys
        type: Record type, or None for untyped keys
        id: Record id

    Returns:
        The Redis key
    """
    _require(prefix, "prefix")
    _require(id, "id")
    if type is None:
        return f"{prefix}{SEPARATOR}{id}"
    _require(type, "type")
    return f"{prefix}{SEPARATOR}{type}{SEPARATOR}{id}"


def key_prefix(prefix: str, type: str | None = None) -> str:
    """Leading part of every key under ``prefix`` (and ``type``)."""
    if type is None:
        return f"{prefix}{SEPARATOR}"
    return f"{prefix}{SEPARATOR}{type}{SEPARATOR}"


def extract_id_from_key(prefix: str, type: str | None, key: str) -> str:
    """Recover the id part of a key.

    Without a type only the prefix is stripped, so ``store:article:art1``
    yields ``article:art1``. Keys outside the prefix are returned as-is.
    """
    lead = key_prefix(prefix, type)
    if key.startswith(lead):
        return key[len(lead):]
    return key


def build_pattern(prefix: str, pattern: str, type: str | None = None) -> str:
    """Build the glob passed to ``SCAN MATCH``."""
    _require(prefix, "prefix")
    return f"{key_prefix(prefix, type)}{pattern}*"
