"""The gateway's two URL shapes.

- ``/{name}``             bare name -> 307 to the canonical page URL
- ``/{section}/{name}``   ``name`` must end in ``.html`` -> render pipeline
"""

from manhttpd._internal.offload import Offload, run_blocking
from manhttpd.app import App
from manhttpd.config import GatewayConfig
from manhttpd.http.request import Request
from manhttpd.http.response import Redirect, Response
from manhttpd.manpages.formatter import MandocFormatter, PageShell
from manhttpd.manpages.pages import PageRef
from manhttpd.manpages.pipeline import Formatter, RenderPipeline
from manhttpd.manpages.resolver import SectionResolver
from manhttpd.manpages.store import ManStore


def create_app(
    config: GatewayConfig | None = None,
    *,
    store: ManStore | None = None,
    formatter: Formatter | None = None,
    offload: Offload = run_blocking,
) -> App:
    """Build the gateway application.

    *store*, *formatter* and *offload* default to the real corpus under
    ``config.man_root``, ``mandoc``, and anyio's worker threads. Tests pass
    fakes for any of them.
    """
    config = config or GatewayConfig()
    store = store or ManStore(config.man_root)
    formatter = formatter or MandocFormatter(
        command=config.formatter_command,
        link_template=config.link_template,
        shell=PageShell(stylesheet=config.stylesheet, lang=config.lang),
    )

    resolver = SectionResolver(store.exists, offload=offload, priority=config.section_priority)
    pipeline = RenderPipeline(store, formatter, offload=offload)

    app = App(config)

    @app.route("/{name}", name="find")
    async def find(name: str) -> Redirect:
        return await resolver.redirect(name)

    @app.route("/{section}/{name}", name="render")
    async def render(request: Request, section: str, name: str) -> Response | Redirect:
        # The header is validated before the path: a bad date is a 400
        # even for a name without the .html suffix.
        since = request.if_modified_since
        page = PageRef.from_url(section, name)
        return await pipeline.render(page, since)

    return app
