"""HTTP/1.1 over one already-accepted stream, driven by h11.

There is no listener and no accept loop: the supervisor accepted the
connection, and this module serves requests on it one after another
(keep-alive) until the client closes, asks to close, goes idle for
``keep_alive_timeout`` seconds, or breaks the protocol.

Each request is handed to an ASGI application. The application runs on
the same event loop; anything blocking it does must be offloaded.
"""

import asyncio
import logging
import time
from http import HTTPStatus
from typing import Any
from urllib.parse import unquote

import h11

from manhttpd._internal.asgi import ASGIApp, Message
from manhttpd.http.dates import format_http_date
from manhttpd.server.terminal_errors import log_error

logger = logging.getLogger("manhttpd.server")

_READ_SIZE = 64 * 1024


def _address(value: Any) -> tuple[str, int] | None:
    """ASGI ``(host, port)`` from a socket address; ``None`` for AF_UNIX."""
    if isinstance(value, tuple) and len(value) >= 2:
        return str(value[0]), int(value[1])
    return None


def _reason(status: int) -> bytes:
    try:
        return HTTPStatus(status).phrase.encode("ascii")
    except ValueError:
        return b""


class HTTPConnection:
    """Serves sequential HTTP/1.1 requests from one reader/writer pair.

    Usage::

        reader, writer = await asyncio.open_connection(sock=sock)
        await HTTPConnection(app, reader, writer).run()
    """

    __slots__ = (
        "_app",
        "_client",
        "_conn",
        "_keep_alive_timeout",
        "_method",
        "_reader",
        "_request_done",
        "_response_complete",
        "_response_started",
        "_server",
        "_writer",
        "requests_served",
    )

    def __init__(
        self,
        app: ASGIApp,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        keep_alive_timeout: float = 5.0,
        max_incomplete_event_size: int = 16 * 1024,
    ) -> None:
        self._app = app
        self._reader = reader
        self._writer = writer
        self._keep_alive_timeout = keep_alive_timeout
        self._conn = h11.Connection(
            h11.SERVER, max_incomplete_event_size=max_incomplete_event_size
        )
        self._server = _address(writer.get_extra_info("sockname"))
        self._client = _address(writer.get_extra_info("peername"))
        self.requests_served = 0
        self._reset_cycle()

    def _reset_cycle(self) -> None:
        self._method = b""
        self._request_done = False
        self._response_started = False
        self._response_complete = False

    # -- Connection loop --

    async def run(self) -> None:
        """Serve requests until the connection is finished, then close it."""
        try:
            while True:
                event = await self._next_event()
                if not isinstance(event, h11.Request):
                    return
                await self._serve(event)
                self.requests_served += 1
                if not await self._next_cycle():
                    return
        except h11.RemoteProtocolError as exc:
            logger.debug("Protocol error from client: %s", exc)
            await self._send_protocol_error(exc)
        except ConnectionError as exc:
            logger.debug("Client connection lost: %s", exc)
        finally:
            await self._close()

    async def _next_event(self) -> Any:
        """Next h11 event, reading more bytes as needed.

        Returns ``None`` when the peer stays silent past the keep-alive
        timeout.
        """
        while True:
            event = self._conn.next_event()
            if event is not h11.NEED_DATA:
                return event
            try:
                data = await asyncio.wait_for(
                    self._reader.read(_READ_SIZE), self._keep_alive_timeout
                )
            except TimeoutError:
                logger.debug("Connection idle for %.1fs, closing", self._keep_alive_timeout)
                return None
            self._conn.receive_data(data)

    async def _next_cycle(self) -> bool:
        """Prepare for another request on this connection, if allowed."""
        if not self._response_complete:
            return False
        while self._conn.their_state is h11.SEND_BODY:
            # The handler ignored the request body; discard the rest of it.
            event = await self._next_event()
            if event is None or isinstance(event, h11.ConnectionClosed):
                return False
        if self._conn.our_state is h11.DONE and self._conn.their_state is h11.DONE:
            self._conn.start_next_cycle()
            self._reset_cycle()
            return True
        return False

    # -- One request --

    async def _serve(self, request: h11.Request) -> None:
        self._method = request.method
        target = request.target.decode("latin-1")
        raw_path, _, query = target.partition("?")
        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": request.http_version.decode("ascii"),
            "method": request.method.decode("ascii"),
            "scheme": "http",
            "path": unquote(raw_path),
            "raw_path": raw_path.encode("latin-1"),
            "query_string": query.encode("latin-1"),
            "root_path": "",
            "headers": [(name.lower(), value) for name, value in request.headers],
            "server": self._server,
            "client": self._client,
        }

        try:
            await self._app(scope, self._receive, self._send)
        except Exception as exc:
            log_error(exc, context=f"{scope['method']} {scope['path']}")
            if not self._response_started:
                await self._send_plain(500, b"Internal Server Error")
            return

        if not self._response_started:
            logger.error("Application returned without responding to %s", scope["path"])
            await self._send_plain(500, b"Internal Server Error")

    async def _receive(self) -> Message:
        if self._request_done:
            return {"type": "http.disconnect"}
        event = await self._next_event()
        if isinstance(event, h11.Data):
            return {"type": "http.request", "body": bytes(event.data), "more_body": True}
        if isinstance(event, h11.EndOfMessage):
            self._request_done = True
            return {"type": "http.request", "body": b"", "more_body": False}
        return {"type": "http.disconnect"}

    async def _send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            if self._response_started:
                msg = "Response already started"
                raise RuntimeError(msg)
            headers = list(message.get("headers", []))
            if not any(name.lower() == b"date" for name, _ in headers):
                headers.append((b"date", format_http_date(time.time()).encode("latin-1")))
            status = message["status"]
            self._response_started = True
            await self._write(
                self._conn.send(
                    h11.Response(status_code=status, headers=headers, reason=_reason(status))
                )
            )
        elif message["type"] == "http.response.body":
            if not self._response_started or self._response_complete:
                msg = "Response body sent outside of a response"
                raise RuntimeError(msg)
            body = message.get("body", b"")
            # HEAD responses advertise the length but carry no bytes
            if body and self._method != b"HEAD":
                await self._write(self._conn.send(h11.Data(data=body)))
            if not message.get("more_body", False):
                self._response_complete = True
                await self._write(self._conn.send(h11.EndOfMessage()))

    async def _send_plain(self, status: int, body: bytes) -> None:
        await self._send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": [
                    (b"content-type", b"text/plain; charset=utf-8"),
                    (b"content-length", str(len(body)).encode("latin-1")),
                ],
            }
        )
        await self._send({"type": "http.response.body", "body": body})

    async def _send_protocol_error(self, exc: h11.RemoteProtocolError) -> None:
        if self._conn.our_state not in {h11.IDLE, h11.SEND_RESPONSE}:
            return
        try:
            await self._send_plain(exc.error_status_hint, b"Bad Request")
        except (h11.LocalProtocolError, ConnectionError) as send_exc:
            logger.debug("Could not report protocol error: %s", send_exc)

    # -- Transport --

    async def _write(self, data: bytes | None) -> None:
        if data:
            self._writer.write(data)
            await self._writer.drain()

    async def _close(self) -> None:
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except ConnectionError as exc:
            logger.debug("Error while closing connection: %s", exc)
