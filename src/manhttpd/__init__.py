"""manhttpd: serve the system's manual pages as HTML, one connection per process.

A supervisor accepts the TCP connection and starts ``manhttpd`` with the
connected socket on stdin. Pages are looked up in a gzip-compressed
``man{section}/`` tree, rendered by ``mandoc``, and revalidated with
``If-Modified-Since``.

Basic usage::

    from manhttpd import Bootstrap, GatewayConfig, create_app

    config = GatewayConfig(man_root="/usr/share/man")
    Bootstrap(create_app(config), 0, config=config).run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "Bootstrap",
    "ConfigurationError",
    "FormatterError",
    "GatewayConfig",
    "HTTPError",
    "ManhttpdError",
    "NotFound",
    "PageRef",
    "Redirect",
    "Request",
    "Response",
    "create_app",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import manhttpd`` cheap for the CLI's ``--help`` path.
    """
    if name == "App":
        from manhttpd.app import App

        return App

    if name == "Bootstrap":
        from manhttpd.server.bootstrap import Bootstrap

        return Bootstrap

    if name == "GatewayConfig":
        from manhttpd.config import GatewayConfig

        return GatewayConfig

    if name == "create_app":
        from manhttpd.manpages.routes import create_app

        return create_app

    if name == "PageRef":
        from manhttpd.manpages.pages import PageRef

        return PageRef

    if name == "Request":
        from manhttpd.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from manhttpd.http import response as _resp

        return getattr(_resp, name)

    if name in ("ConfigurationError", "FormatterError", "HTTPError", "ManhttpdError", "NotFound"):
        from manhttpd import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
