"""Conditional render pipeline for one concrete page.

Steps, each of which may end the request:

1. stat the backing document (offloaded)
2. ``If-Modified-Since`` at or after the mtime -> 304, nothing else runs
3. read the first line (offloaded); a ``.so`` line -> 307 to the target
4. format with mandoc (offloaded) -> 200

The 200 and the alias redirect both carry ``Date: <mtime>``. That value
is what a cache sends back as ``If-Modified-Since``, so the comparison in
step 2 is against the same clock.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol, TypeVar

from manhttpd._internal.offload import Offload, run_blocking
from manhttpd.errors import Forbidden, HTTPError, InternalServerError, NotFound
from manhttpd.http.response import Redirect, Response
from manhttpd.manpages.pages import PageRef, alias_url
from manhttpd.manpages.store import ManStore
from manhttpd.server.terminal_errors import log_error

T = TypeVar("T")


class Formatter(Protocol):
    """Anything that turns a backing document into an HTML document."""

    def render(self, path: str | Path) -> str: ...


def translate_failure(exc: Exception, *, context: str) -> HTTPError:
    """Map a storage or formatter failure onto the HTTP outcome.

    Missing files are 404 and unreadable ones 403. Everything else is a
    500; those are logged here, since the client only ever sees the status.
    """
    if isinstance(exc, FileNotFoundError):
        return NotFound()
    if isinstance(exc, PermissionError):
        return Forbidden()
    log_error(exc, context=context)
    return InternalServerError()


class RenderPipeline:
    """Serves ``PageRef``s from a ``ManStore`` through a ``Formatter``."""

    __slots__ = ("formatter", "offload", "store")

    def __init__(
        self,
        store: ManStore,
        formatter: Formatter,
        *,
        offload: Offload = run_blocking,
    ) -> None:
        self.store = store
        self.formatter = formatter
        self.offload = offload

    async def render(self, page: PageRef, since: int | None = None) -> Response | Redirect:
        """Produce the response for *page* given the client's freshness token."""
        path = self.store.document_path(page)

        mtime: int = await self._run(lambda: self.store.modified(path), "stat")
        if since is not None and since >= mtime:
            return Response(body="", status=304)

        target: str | None = await self._run(lambda: self.store.read_alias(path), "read")
        if target is not None:
            return Redirect(alias_url(target)).with_date(mtime)

        html: str = await self._run(lambda: self.formatter.render(path), "format")
        return Response(body=html).with_date(mtime)

    async def _run(self, func: Callable[[], T], context: str) -> T:
        try:
            return await self.offload(func)
        except HTTPError:
            raise
        except Exception as exc:
            raise translate_failure(exc, context=context) from exc
