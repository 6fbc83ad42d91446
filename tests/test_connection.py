"""Tests for manhttpd.server.connection: HTTP/1.1 over a socketpair."""

import asyncio
import logging
import socket
from typing import Any

import pytest

from conftest import PAGE_MTIME
from manhttpd.app import App
from manhttpd.http.dates import format_http_date
from manhttpd.server.connection import HTTPConnection


async def _exchange(app: Any, payload: bytes, *, keep_alive_timeout: float = 2.0) -> tuple[bytes, int]:
    """Send *payload*, half-close, and collect everything the server writes."""
    server_sock, client_sock = socket.socketpair()
    reader, writer = await asyncio.open_connection(sock=server_sock)
    connection = HTTPConnection(app, reader, writer, keep_alive_timeout=keep_alive_timeout)
    task = asyncio.create_task(connection.run())

    client_reader, client_writer = await asyncio.open_connection(sock=client_sock)
    client_writer.write(payload)
    await client_writer.drain()
    if payload:
        client_writer.write_eof()
    data = await asyncio.wait_for(client_reader.read(), timeout=5)
    await asyncio.wait_for(task, timeout=5)
    client_writer.close()
    return data, connection.requests_served


def _get(path: str, *headers: str, method: str = "GET") -> bytes:
    lines = [f"{method} {path} HTTP/1.1", "Host: localhost", *headers, "", ""]
    return "\r\n".join(lines).encode("latin-1")


async def _raising_app(scope: dict, receive: Any, send: Any) -> None:
    msg = "handler exploded"
    raise RuntimeError(msg)


async def _silent_app(scope: dict, receive: Any, send: Any) -> None:
    return None


class TestSingleRequest:
    async def test_redirect(self, app: App) -> None:
        data, served = await _exchange(app, _get("/mount"))
        assert data.startswith(b"HTTP/1.1 307 Temporary Redirect\r\n")
        assert b"\r\nlocation: /8/mount.8.html\r\n" in data
        assert served == 1

    async def test_page_carries_mtime_date_once(self, app: App) -> None:
        data, _ = await _exchange(app, _get("/1/ls.1.html"))
        head, _, body = data.partition(b"\r\n\r\n")
        assert head.startswith(b"HTTP/1.1 200 OK\r\n")
        assert head.lower().count(b"\r\ndate: ") == 1
        assert f"date: {format_http_date(PAGE_MTIME)}".encode() in head
        assert b"list directory contents" in body

    async def test_date_added_when_app_sets_none(self, app: App) -> None:
        data, _ = await _exchange(app, _get("/xyz"))
        assert data.startswith(b"HTTP/1.1 404 Not Found\r\n")
        assert b"\r\ndate: " in data

    async def test_not_modified(self, app: App) -> None:
        since = format_http_date(PAGE_MTIME)
        data, _ = await _exchange(app, _get("/1/ls.1.html", f"If-Modified-Since: {since}"))
        assert data.startswith(b"HTTP/1.1 304 Not Modified\r\n")
        assert data.endswith(b"\r\n\r\n")

    async def test_not_modified_omits_entity_headers(self, app: App) -> None:
        since = format_http_date(PAGE_MTIME)
        payload = _get("/1/ls.1.html", f"If-Modified-Since: {since}") + _get(
            "/ls.1", "Connection: close"
        )
        data, served = await _exchange(app, payload)
        first, _, rest = data.partition(b"\r\n\r\n")
        names = [line.partition(b":")[0].lower() for line in first.split(b"\r\n")[1:]]
        assert first.startswith(b"HTTP/1.1 304 Not Modified")
        assert b"content-length" not in names
        assert b"content-type" not in names
        assert b"date" in names
        # The next response follows the 304 head directly
        assert rest.startswith(b"HTTP/1.1 307 Temporary Redirect\r\n")
        assert served == 2

    async def test_head_has_length_but_no_body(self, app: App) -> None:
        data, _ = await _exchange(app, _get("/1/ls.1.html", method="HEAD"))
        head, _, body = data.partition(b"\r\n\r\n")
        assert head.startswith(b"HTTP/1.1 200 OK\r\n")
        length = next(line for line in head.split(b"\r\n") if line.startswith(b"content-length:"))
        assert int(length.partition(b":")[2]) > 0
        assert body == b""

    async def test_percent_encoded_path_is_decoded(self, app: App) -> None:
        data, _ = await _exchange(app, _get("/1/ls%2E1.html"))
        assert data.startswith(b"HTTP/1.1 200 OK\r\n")


class TestKeepAlive:
    async def test_pipelined_requests(self, app: App) -> None:
        payload = _get("/ls.1") + _get("/mount", "Connection: close")
        data, served = await _exchange(app, payload)
        assert data.count(b"HTTP/1.1 307 ") == 2
        assert served == 2

    async def test_connection_close_stops_after_first(self, app: App) -> None:
        payload = _get("/ls.1", "Connection: close") + _get("/mount")
        data, served = await _exchange(app, payload)
        assert data.count(b"HTTP/1.1 ") == 1
        assert served == 1

    async def test_unread_body_is_discarded(self, app: App) -> None:
        payload = (
            b"POST /ls HTTP/1.1\r\nHost: localhost\r\nContent-Length: 5\r\n\r\nhello"
            + _get("/ls.1", "Connection: close")
        )
        data, served = await _exchange(app, payload)
        assert data.startswith(b"HTTP/1.1 405 Method Not Allowed\r\n")
        assert b"HTTP/1.1 307 Temporary Redirect\r\n" in data
        assert served == 2

    async def test_idle_timeout_closes(self, app: App) -> None:
        data, served = await _exchange(app, b"", keep_alive_timeout=0.05)
        assert data == b""
        assert served == 0

    async def test_http10_closes_after_response(self, app: App) -> None:
        data, served = await _exchange(app, b"GET /ls.1 HTTP/1.0\r\n\r\n" + _get("/mount"))
        assert data.count(b"HTTP/1.1 ") == 1
        assert served == 1


class TestFailures:
    async def test_malformed_request_gets_400(self, app: App) -> None:
        data, served = await _exchange(app, b"garbage\r\n\r\n")
        assert data.startswith(b"HTTP/1.1 400 ")
        assert served == 0

    async def test_application_exception_is_500(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="manhttpd.server"):
            data, _ = await _exchange(_raising_app, _get("/", "Connection: close"))
        assert data.startswith(b"HTTP/1.1 500 Internal Server Error\r\n")
        assert b"handler exploded" not in data
        assert "handler exploded" in caplog.text

    async def test_application_without_response_is_500(self) -> None:
        data, _ = await _exchange(_silent_app, _get("/", "Connection: close"))
        assert data.startswith(b"HTTP/1.1 500 ")
