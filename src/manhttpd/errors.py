"""manhttpd exception hierarchy.

Shared across Router, App, the request handler and the man page pipeline
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class ManhttpdError(Exception):
    """Base for all manhttpd-specific errors."""


class ConfigurationError(ManhttpdError):
    """Raised when gateway configuration is invalid.

    Typically raised by ``GatewayConfig.from_env()`` at startup.
    """


class FormatterError(ManhttpdError):
    """The external formatter could not be run or produced unusable output."""


@dataclass(frozen=True, slots=True)
class HTTPError(ManhttpdError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, the section resolver and the render pipeline.
    The ASGI handler catches these and turns them into a response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400: the client sent something we cannot parse."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class Forbidden(HTTPError):  # noqa: N818
    """403: the corpus entry exists but cannot be read."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404: no route, no page, or no usable alias target."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class InternalServerError(HTTPError):
    """500: a storage or formatter failure that was already logged."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)
