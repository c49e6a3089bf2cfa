"""Path trie for route lookup.

Routes go in during assembly; ``compile()`` freezes the trie. ``match()``
never raises: an unmatched request is the route table's business (it
falls through to the catch-all).

Lookup precedence at each level: a static segment, then a typed
parameter, then a ``{name:path}`` tail that swallows the rest. A request
method is matched exactly first (``HEAD`` then tries ``GET``), then against
``ALL``. Each route keeps its own parameter names, and values reach the
handler already converted (``{id:int}`` gives an ``int``).
"""

import re
from dataclasses import dataclass, field
from typing import Any

from wren.errors import ConfigurationError
from wren.routing.methods import HttpMethod
from wren.routing.params import CONVERTERS
from wren.routing.route import PathSegment, Route, RouteMatch

_PARAM = re.compile(r"^\{(?P<name>[^:{}]+)(?::(?P<type>[^{}]+))?\}$")


def parse_path(path: str) -> list[PathSegment]:
    """Split a route path into static and parameter segments.

    Examples::

        "/todos"             -> [PathSegment("todos")]
        "/todos/{id}"        -> [PathSegment("todos"), PathSegment("{id}", is_param=True, ...)]
        "/todos/{id:int}"    -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{rest:path}" -> [..., PathSegment("{rest:path}", is_param=True, param_type="path")]

    Raises:
        ConfigurationError: On an unknown converter, a ``path`` parameter
            that is not last, or a path that does not start with ``/``.
    """
    if not path.startswith("/"):
        msg = f"Route path {path!r} must start with '/'."
        raise ConfigurationError(msg)

    parts = [p for p in path.split("/") if p]
    segments: list[PathSegment] = []
    for position, part in enumerate(parts, start=1):
        found = _PARAM.match(part)
        if found is None:
            segments.append(PathSegment(value=part))
            continue
        param_type = found["type"] or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown path converter {param_type!r} in {path!r}."
            raise ConfigurationError(msg)
        if param_type == "path" and position != len(parts):
            msg = f"A path parameter must be the last segment: {path!r}."
            raise ConfigurationError(msg)
        segments.append(
            PathSegment(value=part, is_param=True, param_name=found["name"], param_type=param_type)
        )
    return segments


# Typed parameters are tried before catch-all strings at the same level
_PARAM_ORDER = ("int", "float", "str")


@dataclass(frozen=True, slots=True)
class _Leaf:
    """A route plus the names and converters of its own parameters, in path order."""

    route: Route
    params: tuple[tuple[str, str], ...]

    def bind(self, values: tuple[str, ...]) -> dict[str, Any]:
        return {
            name: CONVERTERS[param_type][1](value)
            for (name, param_type), value in zip(self.params, values, strict=True)
        }


def _pick(leaves: dict[str, _Leaf], method: str) -> _Leaf | None:
    leaf = leaves.get(method)
    if leaf is None and method == HttpMethod.HEAD.value:
        leaf = leaves.get(HttpMethod.GET.value)
    if leaf is None:
        leaf = leaves.get(HttpMethod.ALL.value)
    return leaf


@dataclass(slots=True)
class _Node:
    static: dict[str, "_Node"] = field(default_factory=dict)
    # One edge per converter; parameter names live on the leaves
    params: dict[str, "_Param"] = field(default_factory=dict)
    tail: dict[str, _Leaf] = field(default_factory=dict)
    leaves: dict[str, _Leaf] = field(default_factory=dict)


@dataclass(slots=True)
class _Param:
    pattern: re.Pattern[str]
    node: _Node = field(default_factory=_Node)


class Router:
    """Trie router.

    Usage::

        router = Router()
        router.add(Route("/todos", HttpMethod.GET, handler))
        router.add(Route("/todos/{id:int}", HttpMethod.GET, handler))
        router.compile()
        match = router.match("GET", "/todos/42")   # path_params == {"id": 42}
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _Node()
        self._compiled = False
        self._routes: list[Route] = []

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def add(self, route: Route) -> None:
        """Insert *route*. Only allowed before ``compile()``.

        The first route for a given method and path shape wins; later
        duplicates are kept for introspection only. Routes that share a
        shape but name their parameters differently each keep their own
        names.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise ConfigurationError(msg)

        method = HttpMethod.parse(route.method).value
        segments = parse_path(route.path)
        self._routes.append(route)
        leaf = _Leaf(
            route,
            tuple((seg.param_name or "", seg.param_type) for seg in segments if seg.is_param),
        )

        node = self._root
        for seg in segments:
            if not seg.is_param:
                node = node.static.setdefault(seg.value, _Node())
            elif seg.param_type == "path":
                node.tail.setdefault(method, leaf)
                return
            else:
                edge = node.params.get(seg.param_type)
                if edge is None:
                    regex, _ = CONVERTERS[seg.param_type]
                    edge = node.params[seg.param_type] = _Param(re.compile(f"^{regex}$"))
                node = edge.node
        node.leaves.setdefault(method, leaf)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Find the route for *method* and *path*, or ``None``.

        ``HEAD`` falls back to the ``GET`` route. A known path requested
        with an unregistered method is ``None`` too; there is no separate
        "method not allowed" outcome.
        """
        parts = [p for p in path.split("/") if p]
        return self._walk(self._root, parts, 0, (), method.upper())

    def _walk(
        self,
        node: _Node,
        parts: list[str],
        index: int,
        values: tuple[str, ...],
        method: str,
    ) -> RouteMatch | None:
        if index == len(parts):
            leaf = _pick(node.leaves, method)
            return None if leaf is None else _matched(leaf, values)

        part = parts[index]

        child = node.static.get(part)
        if child is not None:
            found = self._walk(child, parts, index + 1, values, method)
            if found is not None:
                return found

        for param_type in _PARAM_ORDER:
            edge = node.params.get(param_type)
            if edge is None or not edge.pattern.match(part):
                continue
            found = self._walk(edge.node, parts, index + 1, (*values, part), method)
            if found is not None:
                return found

        leaf = _pick(node.tail, method)
        if leaf is not None:
            return _matched(leaf, (*values, "/".join(parts[index:])))

        return None


def _matched(leaf: _Leaf, values: tuple[str, ...]) -> RouteMatch:
    return RouteMatch(route=leaf.route, path_params=leaf.bind(values))
