"""Tests for the transporter entry points, driven the way the host calls them."""

import asyncio

import pytest
from pydantic import ValidationError

from redis_transporter import NULL_SENTINEL, transporter
from redis_transporter.connection import ConnectionStatus


def _get(options: dict, **payload) -> dict:
    return {"type": "GET", "payload": payload, "meta": {"options": options}}


class TestTransporter:
    async def test_get_data(self, redis_server, options_data, article_1) -> None:
        """Test connect, send and disconnect for a single record."""
        connection = await transporter.connect(options_data)
        response = await transporter.send(_get(options_data, type="article", id="art1"), connection)
        await transporter.disconnect(connection)

        assert response.status == "ok"
        assert response.data == article_1
        assert connection.client is None

    async def test_reconnect_after_server_disconnect(
        self, redis_server, options_data, article_1, article_2
    ) -> None:
        """Test a client closed underneath us is replaced after idle expiry."""
        options = {**options_data, "connectionTimeout": 50}

        connection = await transporter.connect(options)
        response1 = await transporter.send(_get(options, type="article", id="art1"), connection)

        # Close the client behind the connection's back, then let it expire
        await connection.client.aclose()
        await asyncio.sleep(0.15)

        new_connection = await transporter.connect(options, connection)
        response2 = await transporter.send(_get(options, type="article", id="art2"), new_connection)
        await transporter.disconnect(new_connection)

        assert response1.status == "ok"
        assert response1.data == article_1
        assert response2.status == "ok"
        assert response2.data == article_2
        assert new_connection is connection
        assert redis_server.connect_count == 2

    async def test_several_ids(self, redis_server, options_data) -> None:
        connection = await transporter.connect(options_data)
        response = await transporter.send(
            _get(options_data, type="article", id=["art1", "art3"]), connection
        )
        await transporter.disconnect(connection)

        assert response.status == "ok"
        assert isinstance(response.data, list)
        assert [record["id"] for record in response.data] == ["art1", "art3"]

    async def test_connect_unreachable(self, redis_server, options_data) -> None:
        """Test connect never raises on an unreachable server."""
        redis_server.reachable = False

        connection = await transporter.connect(options_data)

        assert connection.status == ConnectionStatus.ERROR

    def test_prepare_options_rejects_malformed(self) -> None:
        with pytest.raises(ValidationError):
            transporter.prepare_options({"redis": {"uri": "redis://localhost:6379"}})

    def test_prepare_options_passthrough(self) -> None:
        options = transporter.prepare_options({"prefix": "store"})

        assert transporter.prepare_options(options) is options


class TestWriteRecord:
    """Test the write path used to seed records."""

    async def test_write_then_read(self, redis_server, options_data) -> None:
        """Test a written record reads back unchanged."""
        record = {
            "id": "art4",
            "title": "Article 4",
            "publishedAt": None,
            "author": {"id": "lucyk", "name": "Lucy K."},
        }
        connection = await transporter.connect(options_data)

        written = await transporter.write_record(connection, "article", "art4", record)
        response = await transporter.send(_get(options_data, type="article", id="art4"), connection)
        await transporter.disconnect(connection)

        assert written.status == "ok"
        assert written.data == {"id": "art4", "key": "store:article:art4"}
        assert redis_server.hashes["store:article:art4"]["publishedAt"] == NULL_SENTINEL
        assert "id" not in redis_server.hashes["store:article:art4"]
        assert response.data == record

    async def test_write_without_connection(self) -> None:
        response = await transporter.write_record(None, "article", "art4", {"title": "x"})

        assert response.status == "error"
        assert response.error == "no connection"

    async def test_write_unserializable(self, redis_server, options_data) -> None:
        connection = await transporter.connect(options_data)

        response = await transporter.write_record(
            connection, "article", "art5", {"author": {"ref": object()}}
        )
        await transporter.disconnect(connection)

        assert response.status == "error"
        assert "Cannot serialize" in response.error
