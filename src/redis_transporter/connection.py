"""Redis connection lifecycle.

A Connection moves through these states:

    disconnected -> connecting -> connected -> expiring -> disconnected

Transitions happen only on explicit connect() calls and when the idle
expiry fires. There is no background reconnect: the next connect() call
after an expiry opens a new client on the same Connection object.
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from enum import Enum
from urllib.parse import urlsplit, urlunsplit

import redis.asyncio as redis

from redis_transporter.disconnect import close_client
from redis_transporter.errors import NoConnectionError, StoreConnectionError
from redis_transporter.models import TransporterOptions
from redis_transporter.observability import get_logger

logger = get_logger(__name__)


class ConnectionStatus(str, Enum):
    """Connection status."""

    OK = "ok"
    ERROR = "error"


def _mask_password(url: str) -> str:
    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit(parts._replace(netloc=netloc))


class Connection:
    """Session with one Redis endpoint.

    Invariant: ``client`` is set only while status is OK and the idle
    expiry has not fired since last use. Status OK with no client means
    the connection needs a reconnect, not that it failed.

    ``lock`` guards every change to ``client``.
    """

    def __init__(self, options: TransporterOptions):
        self.options = options
        self.status = ConnectionStatus.OK
        self.error: str | None = None
        self.client: redis.Redis | None = None
        self.last_used_at: datetime | None = None
        self.lock = asyncio.Lock()

        self._expire_task: asyncio.Task | None = None
        self._generation = 0
        self._in_flight = 0

    def __repr__(self) -> str:
        return (
            f"Connection(status={self.status.value!r}, connected={self.is_connected}, "
            f"url={self.safe_url!r})"
        )

    @property
    def is_ok(self) -> bool:
        return self.status == ConnectionStatus.OK

    @property
    def is_connected(self) -> bool:
        return self.is_ok and self.client is not None

    @property
    def safe_url(self) -> str:
        """Endpoint URL with any password masked, for logging."""
        return _mask_password(self.options.redis.url)

    # =========================================================================
    # Connect
    # =========================================================================

    async def open(self) -> None:
        """Open a client unless a fresh one is already present."""
        async with self.lock:
            if self.is_connected:
                return
            await self._establish()

    async def _establish(self) -> None:
        reconnect = self.last_used_at is not None
        client: redis.Redis | None = None
        try:
            client = redis.from_url(self.options.redis.url, decode_responses=True)
            await client.ping()
        except (redis.RedisError, OSError, ValueError) as e:
            if client is not None:
                with contextlib.suppress(Exception):
                    await client.aclose()
            error = StoreConnectionError(f"Could not connect to Redis: {e}")
            self.status = ConnectionStatus.ERROR
            self.error = error.message
            self.client = None
            logger.warning("Redis connection failed", url=self.safe_url, error=str(e))
            return

        self.status = ConnectionStatus.OK
        self.error = None
        self.client = client
        self.last_used_at = datetime.now(UTC)
        self._arm_expiry()
        logger.info(
            "Redis reconnected" if reconnect else "Redis connected",
            url=self.safe_url,
            idle_timeout=self.options.idle_timeout,
        )

    # =========================================================================
    # Use
    # =========================================================================

    @contextlib.asynccontextmanager
    async def lease(self) -> AsyncIterator[redis.Redis]:
        """Borrow the live client for the duration of a dispatch.

        The client is taken under ``lock``, so a lease never starts while
        a connect or a teardown is in progress. The idle expiry is held
        off while any lease is open and re-armed when the last one ends.

        Raises:
            StoreConnectionError: The last connect attempt failed
            NoConnectionError: There is no live client
        """
        async with self.lock:
            if not self.is_ok:
                raise StoreConnectionError(self.error or "Could not connect to Redis")
            client = self.client
            if client is None:
                raise NoConnectionError()

            self._in_flight += 1
            self.cancel_expiry()
        try:
            yield client
        finally:
            self._in_flight -= 1
            if self._in_flight == 0 and self.client is not None:
                self._arm_expiry()

    def touch(self) -> None:
        """Record a successful dispatch."""
        self.last_used_at = datetime.now(UTC)

    def record_client_error(self, error: Exception) -> None:
        """Log an error reported by the client while in use.

        The connection stays usable; redis-py reconnects its pool on the
        next command, and an expired client is replaced by connect().
        """
        logger.warning(
            "Redis client error",
            url=self.safe_url,
            error=str(error),
            error_type=type(error).__name__,
        )

    # =========================================================================
    # Idle expiry
    # =========================================================================

    def cancel_expiry(self) -> None:
        """Cancel the pending idle expiry, if any."""
        self._generation += 1
        task, self._expire_task = self._expire_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _arm_expiry(self) -> None:
        self.cancel_expiry()
        self._expire_task = asyncio.create_task(
            self._expire_after(self.options.idle_timeout, self._generation)
        )

    async def _expire_after(self, timeout: float, generation: int) -> None:
        await asyncio.sleep(timeout)
        async with self.lock:
            # A lease or re-arm since scheduling makes this timer stale
            if generation != self._generation or self._in_flight:
                return
            logger.info(
                "Redis connection idle, disconnecting",
                url=self.safe_url,
                idle_timeout=timeout,
            )
            self._expire_task = None
            await close_client(self)


async def connect(
    options: TransporterOptions,
    connection: Connection | None = None,
) -> Connection:
    """Return a connection with a live client when possible.

    An existing connection with a fresh client is returned unchanged. One
    without a client (expired, failed or never opened) is reconnected in
    place using its stored options. Failures never raise: they are
    recorded on the returned connection's status.

    Args:
        options: Options for a new connection
        connection: Connection from a previous call, if any

    Returns:
        The (possibly new) connection
    """
    if connection is None:
        connection = Connection(options)
    await connection.open()
    return connection
