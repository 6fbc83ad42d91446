"""Read-only access to the gzip-compressed manual page corpus.

Every method here blocks on the filesystem and is meant to run inside
the offload worker, never on the event loop. Errors are raised as the
plain ``OSError`` subclasses the kernel produced; the pipeline decides
what they mean for the response.
"""

import gzip
import os
from pathlib import Path

from manhttpd.manpages.pages import PageRef

ALIAS_MARKER = ".so "


class ManStore:
    """The corpus rooted at *root* (``/usr/share/man`` on most systems).

    A page ``PageRef("1", "ls.1")`` lives at ``<root>/man1/ls.1.gz``.
    """

    __slots__ = ("root",)

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"ManStore({str(self.root)!r})"

    def document_path(self, page: PageRef) -> Path:
        """Deterministic path of the backing document for *page*."""
        return self.root / f"man{page.section}" / f"{page.name}.gz"

    def exists(self, page: PageRef) -> bool:
        """Whether *page* has a backing document. Unreadable counts as absent."""
        return os.path.exists(self.document_path(page))

    def modified(self, path: Path) -> int:
        """Modification time of *path* in whole epoch seconds."""
        return int(path.stat().st_mtime)

    def first_line(self, path: Path) -> str:
        """Decompress and decode the first line of *path*, newline removed.

        Raises ``UnicodeDecodeError`` for a line that is not UTF-8 and
        ``gzip.BadGzipFile`` / ``EOFError`` for a damaged archive.
        """
        with gzip.open(path, "rb") as fh:
            raw = fh.readline()
        return raw.decode("utf-8").removesuffix("\n")

    def read_alias(self, path: Path) -> str | None:
        """The ``.so`` target named on the first line of *path*, if any."""
        line = self.first_line(path)
        if line.startswith(ALIAS_MARKER):
            return line.removeprefix(ALIAS_MARKER)
        return None
