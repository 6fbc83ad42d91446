"""Compiled router with trie-based path matching.

Parameter edges are anonymous: a parameter segment matches exactly one
non-empty path segment, and the names are bound at the terminal node.
That lets ``/{name}`` and ``/{section}/{name}`` share the first edge.
"""

from manhttpd.errors import ConfigurationError, MethodNotAllowed, NotFound
from manhttpd.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/style.css"          -> [PathSegment(literal="style.css")]
        "/{name}"             -> [PathSegment(param="name")]
        "/{section}/{name}"   -> two parameter segments
    """
    if "<" in path and ">" in path:
        msg = (
            f"Route path {path!r} uses <param> syntax. "
            "manhttpd routes declare parameters as {param}."
        )
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            segments.append(PathSegment(param=part[1:-1]))
        else:
            segments.append(PathSegment(literal=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("children", "param_child", "param_names", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "style.css" -> node
        self.children: dict[str, _TrieNode] = {}
        # Any-segment child
        self.param_child: _TrieNode | None = None
        # Names for the parameters captured on the way here (terminal nodes only)
        self.param_names: tuple[str, ...] = ()
        # Routes at this node, keyed by HTTP method
        self.routes_by_method: dict[str, Route] = {}


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/{name}", find, frozenset({"GET"})))
        router.add(Route("/{section}/{name}", render, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/1/ls.1.html")
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        names: list[str] = []
        for seg in parse_path(route.path):
            match seg:
                case PathSegment(param=str() as name):
                    if node.param_child is None:
                        node.param_child = _TrieNode()
                    node = node.param_child
                    names.append(name)
                case PathSegment(literal=str() as literal):
                    node = node.children.setdefault(literal, _TrieNode())

        if node.routes_by_method and node.param_names != tuple(names):
            msg = (
                f"Route {route.path!r} conflicts with an existing route that "
                f"names its parameters {node.param_names!r}."
            )
            raise ConfigurationError(msg)
        node.param_names = tuple(names)

        for method in route.methods:
            node.routes_by_method[method] = route

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, ())
        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        node, values = result
        params = dict(zip(node.param_names, values, strict=True))
        if method in node.routes_by_method:
            return RouteMatch(route=node.routes_by_method[method], path_params=params)
        raise MethodNotAllowed(frozenset(node.routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        values: tuple[str, ...],
    ) -> tuple[_TrieNode, tuple[str, ...]] | None:
        """Recursively match path parts against the trie."""
        if index == len(parts):
            if node.routes_by_method:
                return node, values
            return None

        part = parts[index]

        # Static children win over parameters
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, values)
            if result is not None:
                return result

        if node.param_child is not None:
            return self._match_node(node.param_child, parts, index + 1, (*values, part))

        return None
