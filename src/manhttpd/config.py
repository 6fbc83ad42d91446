"""Gateway configuration.

GatewayConfig is a frozen dataclass. Defaults are overridden by ``MANHTTPD_*``
environment variables, which are in turn overridden by CLI flags.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from manhttpd.errors import ConfigurationError
from manhttpd.manpages.resolver import SECTION_PRIORITY

_ENV_PREFIX = "MANHTTPD_"
_TRUE = frozenset({"1", "true", "yes", "on"})
_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    """Gateway configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = GatewayConfig(man_root="/opt/share/man", debug=True)
    """

    # Corpus
    man_root: str | Path = "/usr/share/man"
    section_priority: tuple[str, ...] = SECTION_PRIORITY

    # Formatter
    formatter_command: str = "mandoc"
    link_template: str = "/%S/%N.%S.html"

    # Document shell
    stylesheet: str = "/style.css"
    lang: str = "en"

    # Socket activation: the supervisor hands over the connection on stdin
    listen_fd: int = 0
    keep_alive_timeout: float = 5.0
    max_incomplete_event_size: int = 16 * 1024  # 16 KiB of request head

    # Diagnostics
    debug: bool = False
    log_level: str = "warning"

    def __post_init__(self) -> None:
        if not self.section_priority:
            msg = "section_priority must name at least one section."
            raise ConfigurationError(msg)
        if self.log_level.lower() not in _LOG_LEVELS:
            msg = f"Unknown log level {self.log_level!r}. Use one of: {', '.join(sorted(_LOG_LEVELS))}"
            raise ConfigurationError(msg)

    def with_overrides(self, **overrides: Any) -> GatewayConfig:
        """Return a copy with every non-``None`` override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            msg = f"Unknown configuration fields: {', '.join(sorted(unknown))}"
            raise ConfigurationError(msg)
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GatewayConfig:
        """Build a config from ``MANHTTPD_*`` environment variables.

        Unset variables keep their defaults. Malformed numbers raise
        ``ConfigurationError`` so a misconfigured unit fails at startup
        rather than on the first request.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(_ENV_PREFIX + name)
            return value if value else None

        overrides: dict[str, Any] = {
            "man_root": get("MAN_ROOT"),
            "formatter_command": get("FORMATTER"),
            "stylesheet": get("STYLESHEET"),
            "log_level": get("LOG_LEVEL"),
        }

        sections = get("SECTIONS")
        if sections is not None:
            overrides["section_priority"] = tuple(
                s.strip() for s in sections.split(",") if s.strip()
            )

        fd = get("FD")
        if fd is not None:
            overrides["listen_fd"] = _parse_number(int, "MANHTTPD_FD", fd)

        keep_alive = get("KEEP_ALIVE")
        if keep_alive is not None:
            overrides["keep_alive_timeout"] = _parse_number(
                float, "MANHTTPD_KEEP_ALIVE", keep_alive
            )

        debug = get("DEBUG")
        if debug is not None:
            overrides["debug"] = debug.lower() in _TRUE

        return cls().with_overrides(**overrides)


def _parse_number(kind: type[int] | type[float], name: str, raw: str) -> Any:
    try:
        return kind(raw)
    except ValueError as exc:
        msg = f"{name} must be a number, got {raw!r}"
        raise ConfigurationError(msg) from exc
