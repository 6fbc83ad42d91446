"""mandoc adapter and the HTML document shell.

``mandoc -T html -O fragment`` emits only the page body; the shell around
it (doctype, metadata, stylesheet) is fixed and lives in ``PageShell``.
Cross references are rewritten by mandoc itself through the ``man=``
output option, so links land on this gateway's ``/{section}/{name}.html``
scheme.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from html import escape
from pathlib import Path

from manhttpd.errors import FormatterError

logger = logging.getLogger("manhttpd.server")


@dataclass(frozen=True, slots=True)
class PageShell:
    """The fixed HTML wrapped around every formatted fragment."""

    stylesheet: str = "/style.css"
    lang: str = "en"

    @property
    def prefix(self) -> str:
        return (
            "<!DOCTYPE html>\n"
            f'<html lang="{escape(self.lang)}">\n'
            "<head>\n"
            '<meta charset="utf-8"/>\n'
            '<meta name="viewport" content="width=device-width, initial-scale=1.0"/>\n'
            f'<link rel="stylesheet" href="{escape(self.stylesheet)}" type="text/css" media="all">\n'
            "</head>\n"
            "<body>\n"
        )

    @property
    def suffix(self) -> str:
        return "\n</body>\n</html>\n"

    def wrap(self, fragment: str) -> str:
        """Place *fragment* inside the document shell."""
        return self.prefix + fragment + self.suffix


@dataclass(frozen=True, slots=True)
class MandocFormatter:
    """Runs ``mandoc`` on a compressed page and returns a full HTML document.

    ``render`` blocks until the subprocess exits and has no timeout; call it
    from the offload worker. The exit status is not checked: mandoc exits
    non-zero on mere style warnings while still producing usable output.
    """

    command: str = "mandoc"
    link_template: str = "/%S/%N.%S.html"
    shell: PageShell = field(default_factory=PageShell)

    def arguments(self, path: str | Path) -> list[str]:
        """The argv used to format *path*."""
        return [
            self.command,
            "-T",
            "html",
            "-O",
            f"fragment,man={self.link_template}",
            str(path),
        ]

    def render(self, path: str | Path) -> str:
        """Format *path* and wrap the fragment in the document shell.

        Raises ``FormatterError`` if the command cannot be started or its
        output is not UTF-8.
        """
        argv = self.arguments(path)
        try:
            # stdin must not be inherited: fd 0 is the client connection
            proc = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            msg = f"Cannot run {self.command!r}: {exc}"
            raise FormatterError(msg) from exc

        if proc.returncode != 0:
            logger.debug(
                "%s exited %d for %s: %s",
                self.command,
                proc.returncode,
                path,
                proc.stderr.decode("utf-8", "replace").strip(),
            )

        try:
            fragment = proc.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"{self.command!r} produced output that is not valid UTF-8 for {path}"
            raise FormatterError(msg) from exc

        return self.shell.wrap(fragment)
