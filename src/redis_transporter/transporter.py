"""Transporter entry points for the host framework.

Usage:
    connection = await transporter.connect(options, connection)
    response = await transporter.send(action, connection)
    await transporter.disconnect(connection)

The host calls connect() before every send(), passing the connection it
got last time, so expired clients are reopened transparently.
"""

from collections.abc import Mapping
from typing import Any

import redis.asyncio as redis

from redis_transporter import dispatch
from redis_transporter.codec import encode
from redis_transporter.connection import Connection, connect
from redis_transporter.disconnect import disconnect
from redis_transporter.errors import TransporterError
from redis_transporter.keys import build_key
from redis_transporter.models import Action, Response, TransporterOptions
from redis_transporter.observability import get_logger

logger = get_logger(__name__)


class Transporter:
    """Redis hash transporter."""

    def prepare_options(
        self, options: TransporterOptions | Mapping[str, Any]
    ) -> TransporterOptions:
        """Validate host options.

        Raises:
            pydantic.ValidationError: Options are malformed
        """
        if isinstance(options, TransporterOptions):
            return options
        return TransporterOptions.model_validate(options)

    async def connect(
        self,
        options: TransporterOptions | Mapping[str, Any],
        connection: Connection | None = None,
    ) -> Connection:
        """Open or reuse a connection. Failures are recorded on its status."""
        return await connect(self.prepare_options(options), connection)

    async def send(
        self,
        action: Action | Mapping[str, Any],
        connection: Connection | None,
    ) -> Response:
        """Dispatch an action. Never raises."""
        return await dispatch.send(action, connection)

    async def disconnect(self, connection: Connection | None) -> None:
        """Close the connection's client. Never raises."""
        await disconnect(connection)

    async def write_record(
        self,
        connection: Connection | None,
        type: str | None,
        id: str,
        record: Mapping[str, Any],
        prefix: str | None = None,
    ) -> Response:
        """Store a record as a hash under ``{prefix}:{type}:{id}``.

        Used to seed data; the ``id`` field itself is not stored.

        Returns:
            Response with status ok and the key written, or status error
        """
        if connection is None:
            return Response.fail("no connection")

        fields = {name: value for name, value in record.items() if name != "id"}
        try:
            key = build_key(prefix or connection.options.prefix, type, id)
            encoded = encode(fields)
            async with connection.lease() as client:
                if encoded:
                    await client.hset(key, mapping=encoded)
            connection.touch()
        except TransporterError as e:
            logger.warning("Write failed", key_id=id, error=e.message)
            return Response.fail(e.message)
        except ValueError as e:
            return Response.fail(f"invalid key: {e}")
        except (redis.RedisError, OSError) as e:
            connection.record_client_error(e)
            return Response.fail(f"Redis error: {e}")

        return Response.ok({"id": id, "key": key})


# Singleton instance
transporter = Transporter()
