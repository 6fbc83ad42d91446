"""manhttpd application class.

Mutable during setup (route registration). Frozen on the first ASGI
call, when the pending routes are compiled into the router.
"""

from dataclasses import dataclass

from manhttpd._internal.asgi import Receive, Scope, Send
from manhttpd._internal.types import Handler
from manhttpd.config import GatewayConfig
from manhttpd.routing.route import Route
from manhttpd.routing.router import Router
from manhttpd.server.handler import handle_request


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """The manhttpd ASGI application.

    Each process serves a single connection, so there is no freeze lock:
    the first request compiles the routes on the only thread there is.
    """

    __slots__ = ("_frozen", "_pending_routes", "_router", "config")

    def __init__(self, config: GatewayConfig | None = None) -> None:
        self.config: GatewayConfig = config or GatewayConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._router: Router | None = None
        self._frozen: bool = False

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ):
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET", "HEAD"]``.
            name: Optional route name, for introspection.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, name))
            return func

        return decorator

    @property
    def router(self) -> Router:
        """The compiled router. Freezes the app on first access."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point. Only ``http`` scopes are served."""
        if scope["type"] != "http":
            return
        await handle_request(
            scope,
            receive,
            send,
            router=self.router,
            debug=self.config.debug,
        )

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if not self._frozen:
            self._freeze()

    def _freeze(self) -> None:
        """Compile the pending routes into the runtime router."""
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET", "HEAD"]))
            router.add(
                Route(
                    path=pending.path,
                    handler=pending.handler,
                    methods=methods,
                    name=pending.name,
                )
            )
        router.compile()
        self._router = router
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes before the first request."
            )
            raise RuntimeError(msg)
