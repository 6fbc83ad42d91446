"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from manhttpd.http.dates import format_http_date


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_date(self, timestamp: float) -> Response:
        """Return a new Response whose ``Date`` header is *timestamp*.

        Content-bearing man page responses stamp the document's mtime
        here so a cache can send it back as ``If-Modified-Since``.
        """
        return self.with_header("Date", format_http_date(timestamp))

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), if set."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect response. Temporary (307) unless told otherwise."""

    url: str
    status: int = 307
    headers: tuple[tuple[str, str], ...] = ()

    def with_date(self, timestamp: float) -> Redirect:
        """Return a new Redirect carrying a ``Date`` header."""
        return replace(
            self, headers=(*self.headers, ("Date", format_http_date(timestamp)))
        )
