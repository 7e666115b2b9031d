"""Idempotent connection teardown.

Shutdown failures are logged and swallowed: the client is discarded
either way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from redis_transporter.errors import ShutdownError
from redis_transporter.observability import get_logger

if TYPE_CHECKING:
    from redis_transporter.connection import Connection

logger = get_logger(__name__)


async def close_client(connection: Connection | None) -> None:
    """Close and drop the client of a connection.

    Callers must hold ``connection.lock``. No-op when there is no
    connection, the connection is in error state, or it has no client.
    """
    if connection is None or not connection.is_ok or connection.client is None:
        return

    client = connection.client
    logger.debug("Disconnecting Redis client", url=connection.safe_url)
    try:
        # No open check first: aclose() on an already closed client is a no-op
        await client.aclose()
    except Exception as e:
        error = ShutdownError(f"Failed to close Redis client: {e}")
        logger.debug("Ignoring shutdown error", error=error.message)
    finally:
        connection.client = None


async def disconnect(connection: Connection | None) -> None:
    """Tear down a connection on request.

    Cancels the idle expiry and closes the client. Safe to call any
    number of times.

    Args:
        connection: Connection to tear down, or None
    """
    if connection is None:
        return

    connection.cancel_expiry()
    async with connection.lock:
        await close_client(connection)
