"""Route table entries: what the app registers and what a match yields."""

from dataclasses import dataclass

from manhttpd._internal.types import Handler


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One ``/``-separated piece of a route pattern.

    Exactly one of *literal* and *param* is set: ``style.css`` must appear
    verbatim, while ``{name}`` captures any single non-empty segment under
    the name ``name``.
    """

    literal: str | None = None
    param: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A handler bound to a path pattern and the methods it answers."""

    path: str
    handler: Handler
    methods: frozenset[str]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """The route chosen for a request, with its captured segments by name."""

    route: Route
    path_params: dict[str, str]
