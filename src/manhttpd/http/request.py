"""Immutable HTTP request.

Frozen metadata only: every route this gateway serves is a GET or HEAD,
so the body is never read.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from manhttpd.errors import BadRequest
from manhttpd.http.dates import parse_http_date
from manhttpd.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path_params`` is empty until the router matches; the handler then
    derives a new request with ``with_path_params()``.
    """

    method: str
    path: str
    headers: Headers
    path_params: dict[str, str]
    http_version: str
    client: tuple[str, int] | None

    @property
    def if_modified_since(self) -> int | None:
        """The ``If-Modified-Since`` header as epoch seconds.

        ``None`` when the header is absent. Raises ``BadRequest`` when it is
        present but not an HTTP-date.
        """
        value = self.headers.get("if-modified-since")
        if value is None:
            return None
        try:
            return parse_http_date(value)
        except ValueError:
            raise BadRequest("cannot parse If-Modified-Since") from None

    def with_path_params(self, params: dict[str, str]) -> Request:
        """Return a copy carrying the router's captured parameters."""
        return replace(self, path_params=params)

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
        )
