"""manhttpd CLI: serve one socket-activated connection.

Entry point registered as ``manhttpd`` in ``pyproject.toml``::

    [project.scripts]
    manhttpd = "manhttpd.cli:main"

Typical supervisor line (inetd)::

    http stream tcp nowait nobody /usr/bin/manhttpd manhttpd
"""

import argparse
import logging
import sys

from manhttpd.config import GatewayConfig
from manhttpd.errors import ConfigurationError

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="manhttpd",
        description=(
            "Serve manual pages as HTML over a connection inherited from a "
            "socket-activating supervisor."
        ),
    )
    parser.add_argument("--man-root", default=None, help="Root of the man{section}/ tree")
    parser.add_argument(
        "--fd",
        type=int,
        default=None,
        help="Descriptor holding the connected socket (default: 0)",
    )
    parser.add_argument("--formatter", default=None, help="mandoc-compatible formatter command")
    parser.add_argument("--stylesheet", default=None, help="Stylesheet URL linked from every page")
    parser.add_argument(
        "--keep-alive-timeout",
        type=float,
        default=None,
        help="Seconds to wait for the next request on the connection",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log threshold for stderr (default: warning)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Log client errors and formatter warnings",
    )
    return parser


def configure_logging(config: GatewayConfig) -> None:
    """Send manhttpd's log records to stderr at the configured level.

    stdout is the client socket under socket activation, so nothing may
    log there.
    """
    level_name = "debug" if config.debug else config.log_level
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(stream=sys.stderr, level=level, format=_LOG_FORMAT)
    logging.getLogger("manhttpd").setLevel(level)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``manhttpd`` command.

    Exits 0 after the connection is done, and also when there was no
    connection to serve.
    """
    args = _build_parser().parse_args(argv)

    try:
        config = GatewayConfig.from_env().with_overrides(
            man_root=args.man_root,
            listen_fd=args.fd,
            formatter_command=args.formatter,
            stylesheet=args.stylesheet,
            keep_alive_timeout=args.keep_alive_timeout,
            log_level=args.log_level,
            debug=args.debug,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(config)

    from manhttpd.manpages.routes import create_app
    from manhttpd.server.bootstrap import Bootstrap

    app = create_app(config)
    Bootstrap(app, config.listen_fd, config=config).run()
    sys.exit(0)
