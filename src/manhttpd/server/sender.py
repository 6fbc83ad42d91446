"""Writes a Response out as ASGI start and body messages.

Statuses that forbid a body (1xx, 204, 304) go out with neither the body
nor the entity headers describing it: no ``Content-Type`` and no
``Content-Length``. The HTTP/1.1 layer frames those as empty on its own.
"""

from collections.abc import Iterable

from manhttpd._internal.asgi import Send
from manhttpd.http.response import Response

_BODYLESS_STATUSES = frozenset({204, 304})


def _has_body(status: int) -> bool:
    return status >= 200 and status not in _BODYLESS_STATUSES


def _encode(pairs: Iterable[tuple[str, str]]) -> list[tuple[bytes, bytes]]:
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls."""
    if _has_body(response.status):
        body = response.body_bytes
        entity = [
            ("content-type", response.content_type),
            ("content-length", str(len(body))),
        ]
    else:
        body = b""
        entity = []

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": _encode([*entity, *response.headers]),
        }
    )
    await send({"type": "http.response.body", "body": body})
