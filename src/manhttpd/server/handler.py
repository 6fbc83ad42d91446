"""ASGI handler: scope in, routed handler, Response out.

Converts the scope to a typed Request, dispatches through the router,
and sends the Response back through ASGI send(). Every failure is turned
into a response here; nothing escapes to the connection layer.
"""

import inspect
from collections.abc import Callable
from typing import Any

from manhttpd._internal.asgi import Receive, Scope, Send
from manhttpd.errors import HTTPError
from manhttpd.http.request import Request
from manhttpd.http.response import Response
from manhttpd.routing.route import RouteMatch
from manhttpd.routing.router import Router
from manhttpd.server.errors import handle_http_error, handle_internal_error
from manhttpd.server.negotiation import negotiate
from manhttpd.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)
    response: Response
    try:
        match = router.match(request.method, request.path)
        response = await _invoke_handler(match, request)
    except HTTPError as exc:
        response = handle_http_error(exc, request, debug=debug)
    except Exception as exc:
        response = handle_internal_error(exc, request)

    await send_response(response, send)


async def _invoke_handler(match: RouteMatch, request: Request) -> Response:
    """Call the matched route handler and negotiate its return value."""
    handler = match.route.handler
    request = request.with_path_params(match.path_params)
    kwargs = _build_handler_kwargs(handler, request, match.path_params)

    result = handler(**kwargs)
    if inspect.isawaitable(result):
        result = await result
    return negotiate(result)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from request + path params.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name)
    """
    sig = inspect.signature(handler)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in path_params:
            kwargs[name] = path_params[name]

    return kwargs
