"""Page references and the URL scheme built around them.

A page is addressed as ``/{section}/{name}.html`` where *name* is the file
stem in the corpus, section suffix included: ``/1/ls.1.html`` reads
``man1/ls.1.gz``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from manhttpd.errors import NotFound

_SECTION = re.compile(r"[0-9A-Za-z]+")
HTML_SUFFIX = ".html"


@dataclass(frozen=True, slots=True)
class PageRef:
    """A (section, name) pair identifying one manual page.

    Built from URL segments, so it refuses anything that could step out of
    ``man<section>/``: path separators, NUL, ``.`` and ``..``.
    """

    section: str
    name: str

    def __post_init__(self) -> None:
        if not _SECTION.fullmatch(self.section):
            msg = f"Invalid manual section {self.section!r}"
            raise ValueError(msg)
        if self.name in ("", ".", "..") or "/" in self.name or "\0" in self.name:
            msg = f"Invalid page name {self.name!r}"
            raise ValueError(msg)

    @property
    def url(self) -> str:
        """Canonical URL of this page."""
        return f"/{self.section}/{self.name}{HTML_SUFFIX}"

    @classmethod
    def from_url(cls, section: str, filename: str) -> PageRef:
        """Build a reference from the two path segments of a render URL.

        Raises ``NotFound`` when *filename* lacks the ``.html`` suffix or
        the segments do not form a valid reference.
        """
        if not filename.endswith(HTML_SUFFIX):
            raise NotFound(f"{filename!r} is not an .html page")
        try:
            return cls(section, filename.removesuffix(HTML_SUFFIX))
        except ValueError as exc:
            raise NotFound(str(exc)) from None

    @classmethod
    def for_topic(cls, section: str, topic: str) -> PageRef:
        """Reference for *topic* filed under *section*: ``ls``, ``1`` -> ``ls.1``."""
        return cls(section, f"{topic}.{section}")


def alias_url(target: str) -> str:
    """URL for the target of a ``.so`` line, e.g. ``man1/ls.1`` -> ``/1/ls.1.html``.

    Targets are relative to the man root and must start with ``man``;
    anything else is a not-found condition.
    """
    if not target.startswith("man"):
        raise NotFound(f"Alias target {target!r} is outside the man hierarchy")
    return f"/{target.removeprefix('man')}{HTML_SUFFIX}"
