"""Return-value negotiation: maps handler results to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

from typing import Any
from urllib.parse import quote

from manhttpd.http.response import Redirect, Response

# Characters RFC 3986 allows unescaped in a path, plus "%" for pre-encoded input
_PATH_SAFE = "/%:@!$&'()*+,;=~"


def negotiate(value: Any) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> status + Location header (+ extra headers)
    3. ``str``              -> 200, text/html
    """
    match value:
        case Response():
            return value
        case Redirect():
            response = Response(body="").with_status(value.status)
            response = response.with_header("Location", quote(value.url, safe=_PATH_SAFE))
            for name, header_value in value.headers:
                response = response.with_header(name, header_value)
            return response
        case str():
            return Response(body=value)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return str, Response, or Redirect."
            )
            raise TypeError(msg)
