"""GET dispatch against Redis hashes.

A payload is either:
- {type?, id}                   one id or an ordered list of ids
- {type?, pattern, onlyIds?}    every key under {prefix}:{pattern}*

Every failure is returned as an error Response; nothing is raised to
the caller.
"""

import time
from collections.abc import Mapping
from typing import Any

import redis.asyncio as redis
from pydantic import ValidationError

from redis_transporter.codec import Record, to_record
from redis_transporter.connection import Connection
from redis_transporter.errors import (
    InvalidActionError,
    InvalidPayloadError,
    NoConnectionError,
    TransporterError,
)
from redis_transporter.keys import build_key, build_pattern, extract_id_from_key
from redis_transporter.models import (
    Action,
    ActionType,
    IdsQuery,
    PatternQuery,
    Response,
    payload_adapter,
)
from redis_transporter.observability import get_logger, log_store_call_end

logger = get_logger(__name__)


def parse_payload(payload: Mapping[str, Any]) -> IdsQuery | PatternQuery:
    """Decide the payload shape once.

    Raises:
        InvalidPayloadError: Neither a valid id nor a valid pattern payload
    """
    try:
        return payload_adapter.validate_python(dict(payload))
    except ValidationError as e:
        reasons = "; ".join(err["msg"] for err in e.errors())
        raise InvalidPayloadError(f"invalid payload: {reasons}") from e


async def read_hashes(client: redis.Redis, keys: list[str]) -> list[dict[str, str]]:
    """Read several hashes in one round trip.

    Keys that do not exist, or do not hold a hash, come back empty.
    """
    if not keys:
        return []

    start = time.perf_counter()
    async with client.pipeline(transaction=False) as pipe:
        for key in keys:
            pipe.hgetall(key)
        results = await pipe.execute(raise_on_error=False)
    log_store_call_end(
        logger,
        "HGETALL",
        success=True,
        duration_ms=(time.perf_counter() - start) * 1000,
        key_count=len(keys),
    )

    hashes = []
    for key, result in zip(keys, results):
        if isinstance(result, Exception):
            logger.warning("Skipping unreadable key", key=key, error=str(result))
            hashes.append({})
        else:
            hashes.append(result or {})
    return hashes


async def scan_keys(client: redis.Redis, match: str) -> list[str]:
    """List keys matching a glob, sorted and without duplicates."""
    start = time.perf_counter()
    keys = {key async for key in client.scan_iter(match=match)}
    log_store_call_end(
        logger,
        "SCAN",
        success=True,
        duration_ms=(time.perf_counter() - start) * 1000,
        match=match,
        key_count=len(keys),
    )
    return sorted(keys)


async def get_by_ids(
    client: redis.Redis, prefix: str, query: IdsQuery
) -> Record | list[Record] | None:
    """Fetch records by id, in request order.

    Ids without a stored hash are left out. A single string id yields the
    record itself, or None when it does not exist.
    """
    ids = query.ids
    keys = [build_key(prefix, query.type, record_id) for record_id in ids]
    hashes = await read_hashes(client, keys)
    records = [to_record(record_id, fields) for record_id, fields in zip(ids, hashes) if fields]

    if query.is_single:
        return records[0] if records else None
    return records


async def get_by_pattern(client: redis.Redis, prefix: str, query: PatternQuery) -> list[Record]:
    """Fetch every record whose key matches the pattern.

    Without a type in the query the returned ids keep their type segment,
    e.g. ``article:art1``.
    """
    keys = await scan_keys(client, build_pattern(prefix, query.pattern, query.type))
    ids = [extract_id_from_key(prefix, query.type, key) for key in keys]

    if query.only_ids:
        return [{"id": record_id} for record_id in ids]

    hashes = await read_hashes(client, keys)
    return [to_record(record_id, fields) for record_id, fields in zip(ids, hashes) if fields]


async def _dispatch(action: Action, connection: Connection | None) -> Any:
    if action.type != ActionType.GET.value:
        raise InvalidActionError(action.type)
    if connection is None:
        raise NoConnectionError()

    options = action.meta.options or connection.options
    async with connection.lease() as client:
        query = parse_payload(action.payload)
        if isinstance(query, IdsQuery):
            data = await get_by_ids(client, options.prefix, query)
        else:
            data = await get_by_pattern(client, options.prefix, query)

    connection.touch()
    return data


async def send(action: Action | Mapping[str, Any], connection: Connection | None) -> Response:
    """Run an action against a connection.

    Args:
        action: Action model or mapping with ``type``, ``payload`` and ``meta``
        connection: Connection returned by connect()

    Returns:
        Response with status ok and data, or status error and a reason
    """
    if not isinstance(action, Action):
        try:
            action = Action.model_validate(action)
        except ValidationError as e:
            logger.warning("Rejected malformed action", error=str(e))
            return Response.fail(f"invalid action: {e.error_count()} validation error(s)")

    try:
        data = await _dispatch(action, connection)
    except TransporterError as e:
        logger.warning("Action failed", action_type=action.type, error=e.message)
        return Response.fail(e.message)
    except ValueError as e:
        # Key segments rejected by the key builder
        logger.warning("Action failed", action_type=action.type, error=str(e))
        return Response.fail(f"invalid payload: {e}")
    except (redis.RedisError, OSError) as e:
        if connection is not None:
            connection.record_client_error(e)
        return Response.fail(f"Redis error: {e}")

    return Response.ok(data)
