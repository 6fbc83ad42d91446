"""Diagnostic formatting for server-side failures.

Storage and formatter failures become a bare 500 for the client; the
detail goes to stderr (the supervisor's journal) through ``log_error``.

Verbosity is chosen by the ``MANHTTPD_TRACEBACK`` environment variable:

- ``compact`` (default): error summary plus the last few manhttpd frames
- ``full``: the complete Python traceback
- ``minimal``: one line with the raising location
"""

from __future__ import annotations

import logging
import os
import traceback as _traceback
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from manhttpd.http.request import Request

logger = logging.getLogger("manhttpd.server")


def _is_app_frame(filename: str) -> bool:
    """True if the frame is outside the stdlib and site-packages."""
    if "site-packages" in filename:
        return False
    if filename.startswith("<"):
        return False
    stdlib_prefix = os.path.dirname(os.__file__)
    return not filename.startswith(stdlib_prefix)


def format_compact_traceback(exc: BaseException) -> str:
    """Error summary plus at most five application frames.

    Falls back to the last three frames when none are application frames
    (for example an ``OSError`` raised straight out of ``os.stat``).
    """
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    display_frames = app_frames if app_frames else frames[-3:]

    parts = [f"{type(exc).__name__}: {exc}"]
    if display_frames:
        parts.append("  Trace:")
        for frame in display_frames[-5:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")
    return "\n".join(parts)


def format_minimal_error(exc: BaseException) -> str:
    """One-line error summary."""
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    last = frames[-1] if frames else None
    location = f" at {last.filename}:{last.lineno}" if last else ""
    return f"{type(exc).__name__}{location}: {exc}"


def log_error(exc: BaseException, request: Request | None = None, *, context: str = "") -> None:
    """Log an internal error with the configured verbosity.

    Args:
        exc: The exception behind the 500.
        request: The request being served, when one is available.
        context: What was being attempted (``"stat"``, ``"format"``, ...).
    """
    prefix = f"500 {request.method} {request.path}" if request is not None else "Server error"
    if context:
        prefix = f"{prefix} ({context})"

    style = os.environ.get("MANHTTPD_TRACEBACK", "compact").lower()
    if style == "full":
        logger.error(prefix, exc_info=exc)
    elif style == "minimal":
        logger.error("%s: %s", prefix, format_minimal_error(exc))
    else:
        logger.error("%s\n%s", prefix, format_compact_traceback(exc))
