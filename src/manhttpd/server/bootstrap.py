"""Socket-activation bootstrap.

The supervisor (inetd, a systemd ``Accept=yes`` socket unit, s6's
``s6-tcpserver`` and friends) accepts the TCP connection and starts one
process per client with the connected socket on file descriptor 0. This
module takes that descriptor over and serves HTTP/1.1 on it.

Anything that is not a connected stream socket (a terminal, a pipe, a
listening socket) means the process was started by hand: the bootstrap
returns quietly without serving and without logging.
"""

import asyncio
import socket
from typing import TypeAlias

from manhttpd._internal.asgi import ASGIApp
from manhttpd.config import GatewayConfig
from manhttpd.server.connection import HTTPConnection

Transport: TypeAlias = int | socket.socket


def adopt_socket(transport: Transport) -> socket.socket | None:
    """Wrap *transport* as a non-blocking connected socket.

    *transport* is a raw descriptor or an already-built socket. Returns
    ``None`` when it is not a socket or has no peer. A descriptor that was
    rejected is left open and untouched.
    """
    if isinstance(transport, socket.socket):
        sock = transport
    else:
        try:
            sock = socket.socket(fileno=transport)
        except OSError:
            return None

    try:
        sock.getpeername()
    except OSError:
        if sock is not transport:
            # Give the descriptor back; closing it is the caller's business.
            sock.detach()
        return None

    sock.setblocking(False)
    return sock


async def serve_socket(
    sock: socket.socket,
    app: ASGIApp,
    *,
    config: GatewayConfig | None = None,
) -> int:
    """Serve HTTP/1.1 on the connected *sock* until the client is done.

    Returns the number of requests served. The socket is closed on return.
    """
    config = config or GatewayConfig()
    reader, writer = await asyncio.open_connection(sock=sock)
    connection = HTTPConnection(
        app,
        reader,
        writer,
        keep_alive_timeout=config.keep_alive_timeout,
        max_incomplete_event_size=config.max_incomplete_event_size,
    )
    await connection.run()
    return connection.requests_served


class Bootstrap:
    """Turns the inherited transport into a served HTTP connection.

    Usage::

        served = Bootstrap(app, 0, config=config).run()

    ``run`` returns ``False`` without side effects when the transport is
    not a connected socket, ``True`` once the connection has been served
    and closed.
    """

    __slots__ = ("app", "config", "transport")

    def __init__(
        self,
        app: ASGIApp,
        transport: Transport = 0,
        *,
        config: GatewayConfig | None = None,
    ) -> None:
        self.app = app
        self.transport = transport
        self.config = config or GatewayConfig()

    def run(self) -> bool:
        sock = adopt_socket(self.transport)
        if sock is None:
            return False
        asyncio.run(serve_socket(sock, self.app, config=self.config))
        return True
