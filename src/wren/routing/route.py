"""Route, PathSegment, and RouteMatch frozen dataclasses."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from wren._internal.types import Handler
from wren.routing.methods import HttpMethod

if TYPE_CHECKING:
    from wren.middleware.protocol import Middleware


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/todos``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A caller-supplied route descriptor.

    ``method`` may be an ``HttpMethod`` or its name in any case
    (``"get"``); it is validated when the route table registers it.
    ``middleware`` runs only for this route, between the global pipeline
    and ``handler``.

    Usage::

        Route("/todos", "get", list_todos)
        Route("/todos", HttpMethod.POST, create_todo, middleware=require_json)
    """

    path: str
    method: HttpMethod | str
    handler: Handler
    middleware: "Middleware | None" = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match. ``path_params`` values are converted."""

    route: Route
    path_params: dict[str, Any]
