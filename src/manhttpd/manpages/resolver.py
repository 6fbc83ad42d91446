"""Section resolution for bare page names.

``/ls`` does not say which section it wants. Either the name carries one
(``ls.1``, ``tclsh.n``) or the corpus is probed in ``SECTION_PRIORITY``
order and the first section that has the page wins.
"""

from collections.abc import Callable, Iterable

from manhttpd._internal.offload import Offload, run_blocking
from manhttpd.errors import NotFound
from manhttpd.http.response import Redirect
from manhttpd.manpages.pages import PageRef

# Commands and admin tools first, then games, syscalls and library
# calls; the rarer sections last.
SECTION_PRIORITY: tuple[str, ...] = ("1", "8", "6", "2", "3", "5", "7", "4", "9", "3p")


def split_section(name: str) -> tuple[str, str] | None:
    """Split ``topic.section`` into ``(topic, section)``.

    Only suffixes that look like a section qualify: the literal ``n`` or
    anything starting with an ASCII digit. Returns ``None`` otherwise.

    >>> split_section("ls.1")
    ('ls', '1')
    >>> split_section("printf.3p")
    ('printf', '3p')
    >>> split_section("os.path") is None
    True
    """
    topic, dot, suffix = name.rpartition(".")
    if not dot:
        return None
    lead = suffix[:1]
    if suffix == "n" or (lead.isascii() and lead.isdigit()):
        return topic, suffix
    return None


def probe_section(
    name: str,
    exists: Callable[[PageRef], bool],
    priority: Iterable[str] = SECTION_PRIORITY,
) -> str | None:
    """First section in *priority* for which ``name.<section>`` exists.

    Stops at the first hit, so *exists* is called once per section up to
    and including the winner.
    """
    for section in priority:
        try:
            page = PageRef.for_topic(section, name)
        except ValueError:
            return None
        if exists(page):
            return section
    return None


class SectionResolver:
    """Turns a bare name into a redirect to its canonical page URL."""

    __slots__ = ("_exists", "_offload", "_priority")

    def __init__(
        self,
        exists: Callable[[PageRef], bool],
        *,
        offload: Offload = run_blocking,
        priority: tuple[str, ...] = SECTION_PRIORITY,
    ) -> None:
        self._exists = exists
        self._offload = offload
        self._priority = priority

    async def resolve(self, name: str) -> PageRef:
        """Resolve *name* to a page or raise ``NotFound``."""
        split = split_section(name)
        if split is not None:
            topic, section = split
        else:
            topic = name
            found = await self._offload(
                lambda: probe_section(name, self._exists, self._priority)
            )
            if found is None:
                raise NotFound(f"No manual entry for {name!r}")
            section = found

        try:
            return PageRef.for_topic(section, topic)
        except ValueError as exc:
            raise NotFound(str(exc)) from None

    async def redirect(self, name: str) -> Redirect:
        """307 to ``/{section}/{topic}.{section}.html``."""
        page = await self.resolve(name)
        return Redirect(page.url)
