"""Error handling pipeline for manhttpd requests.

Maps HTTPError exceptions and unexpected failures to plain-text
responses. Diagnostics stay on the server side.
"""

import logging

from manhttpd.errors import HTTPError
from manhttpd.http.request import Request
from manhttpd.http.response import Response
from manhttpd.server.terminal_errors import log_error

logger = logging.getLogger("manhttpd.server")

_PLAIN = "text/plain; charset=utf-8"


def handle_http_error(exc: HTTPError, request: Request, *, debug: bool = False) -> Response:
    """Map an HTTPError to a Response carrying its status and headers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail, content_type=_PLAIN).with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(exc: Exception, request: Request) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    log_error(exc, request)
    return Response(body="Internal Server Error", content_type=_PLAIN, status=500)
