"""Pytest configuration and shared fixtures."""

import asyncio
import fnmatch
import json
import os
from collections.abc import Iterator
from typing import Any
from unittest.mock import patch

import pytest
import redis.asyncio as redis

# Set test environment before importing settings
os.environ["REDIS_TRANSPORTER_LOG_LEVEL"] = "DEBUG"
os.environ["REDIS_TRANSPORTER_LOG_FORMAT"] = "text"


ARTICLE_1 = [
    "title",
    "Article 1",
    "description",
    "The first article",
    "publishedAt",
    "##null##",
    "author",
    json.dumps({"id": "johnf", "name": "John F."}),
]
ARTICLE_2 = [
    "title",
    "Article 2",
    "description",
    "The second article",
    "publishedAt",
    "2023-11-18T09:14:44Z",
    "author",
    json.dumps({"id": "lucyk", "name": "Lucy K."}),
]
ARTICLE_3 = [
    "title",
    "Article 3",
    "description",
    "The third article",
    "publishedAt",
    "##null##",
    "author",
    json.dumps({"id": "johnf", "name": "John F."}),
]


def _as_mapping(fields: list[str]) -> dict[str, str]:
    return dict(zip(fields[0::2], fields[1::2]))


class MockRedisServer:
    """In-memory stand-in for a Redis server shared by all its clients."""

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.strings: dict[str, str] = {}
        self.clients: list["MockRedisClient"] = []
        self.reachable = True
        self.fail_close = False
        self.close_delay = 0.0

    def client(self, url: str, **kwargs: Any) -> "MockRedisClient":
        client = MockRedisClient(self, url)
        self.clients.append(client)
        return client

    @property
    def connect_count(self) -> int:
        return sum(1 for client in self.clients if client.pinged)

    def hash_type(self, key: str) -> dict[str, str]:
        if key in self.strings:
            raise redis.ResponseError(
                "WRONGTYPE Operation against a key holding the wrong kind of value"
            )
        return self.hashes.get(key, {})


class MockPipeline:
    """Mock non-transactional pipeline."""

    def __init__(self, client: "MockRedisClient"):
        self._client = client
        self._commands: list[str] = []

    async def __aenter__(self) -> "MockPipeline":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self._commands = []

    def hgetall(self, key: str) -> "MockPipeline":
        self._commands.append(key)
        return self

    async def execute(self, raise_on_error: bool = True) -> list[Any]:
        self._client.ensure_open()
        results: list[Any] = []
        for key in self._commands:
            try:
                results.append(dict(self._client.server.hash_type(key)))
            except redis.ResponseError as e:
                if raise_on_error:
                    raise
                results.append(e)
        self._commands = []
        return results


class MockRedisClient:
    """Mock Redis client for testing."""

    def __init__(self, server: MockRedisServer, url: str):
        self.server = server
        self.url = url
        self.pinged = False
        self.closed = False
        self.close_calls = 0

    def ensure_open(self) -> None:
        if self.closed:
            raise redis.ConnectionError("Connection closed by client")
        if not self.server.reachable:
            raise redis.ConnectionError("Error 111 connecting to localhost:6379.")

    async def ping(self) -> bool:
        self.ensure_open()
        self.pinged = True
        return True

    async def aclose(self) -> None:
        self.close_calls += 1
        if self.server.close_delay:
            await asyncio.sleep(self.server.close_delay)
        if self.server.fail_close:
            raise redis.ConnectionError("Connection reset by peer")
        self.closed = True

    async def hgetall(self, key: str) -> dict[str, str]:
        self.ensure_open()
        return dict(self.server.hash_type(key))

    async def hset(self, key: str, mapping: dict[str, str]) -> int:
        self.ensure_open()
        target = self.server.hashes.setdefault(key, {})
        added = sum(1 for field in mapping if field not in target)
        target.update(mapping)
        return added

    async def scan_iter(self, match: str | None = None):
        self.ensure_open()
        # SCAN gives no ordering guarantee
        keys = list(self.server.hashes) + list(self.server.strings)
        for key in reversed(keys):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    def pipeline(self, transaction: bool = True) -> MockPipeline:
        return MockPipeline(self)


@pytest.fixture
def redis_server() -> Iterator[MockRedisServer]:
    """Mock Redis server seeded with three articles, patched into redis.asyncio."""
    server = MockRedisServer()
    server.hashes["store:article:art1"] = _as_mapping(ARTICLE_1)
    server.hashes["store:article:art2"] = _as_mapping(ARTICLE_2)
    server.hashes["store:article:art3"] = _as_mapping(ARTICLE_3)

    with patch("redis.asyncio.from_url", side_effect=server.client):
        yield server


@pytest.fixture
def options_data() -> dict[str, Any]:
    """Transporter options as the host framework sends them."""
    return {
        "prefix": "store",
        "redis": {"uri": "redis://localhost:6379"},
    }


@pytest.fixture
def article_1() -> dict[str, Any]:
    """Expected record for art1."""
    return {
        "id": "art1",
        "title": "Article 1",
        "description": "The first article",
        "publishedAt": None,
        "author": {"id": "johnf", "name": "John F."},
    }


@pytest.fixture
def article_2() -> dict[str, Any]:
    """Expected record for art2."""
    return {
        "id": "art2",
        "title": "Article 2",
        "description": "The second article",
        "publishedAt": "2023-11-18T09:14:44Z",
        "author": {"id": "lucyk", "name": "Lucy K."},
    }


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (require a running Redis)"
    )
